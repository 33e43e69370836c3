"""Command-line harness for exercising the feed screens against a live Supabase project."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Iterable

from framez.config import get_settings
from framez.database import close_backend_client, get_backend_client
from framez.schemas import ViewPost
from framez.services import SessionStore, bootstrap_session
from framez.ui.components.feedback import AlertLog
from framez.ui.formatting import format_timestamp
from framez.ui.pages import CreatePostScreen, FeedScreen, LoginScreen, PostListScreen, ProfileScreen


def _print_posts(posts: Iterable[ViewPost]) -> None:
    print("-" * 80)
    for post in posts:
        liked = "*" if post.user_liked else " "
        preview = (post.content or "").strip().replace("\n", " ")
        image = f" [image: {post.image_url}]" if post.image_url else ""
        print(
            f"{post.id} | {post.user_name} | {format_timestamp(post.created_at)} | "
            f"{liked}{post.likes_count} likes | {post.comments_count} comments :: {preview}{image}"
        )
    print("-" * 80)


def _flush_alerts(alerts: AlertLog) -> bool:
    drained = alerts.drain()
    for alert in drained:
        print(f"[{alert.title}] {alert.message}", file=sys.stderr)
    return bool(drained)


async def _sign_in(args: argparse.Namespace, alerts: AlertLog) -> tuple[object, SessionStore] | None:
    client = await get_backend_client()
    store = SessionStore(client)
    login = LoginScreen(client, alerts, lambda route: None)
    login.email = args.email or os.getenv("FRAMEZ_EMAIL", "")
    login.password = args.password or os.getenv("FRAMEZ_PASSWORD", "")
    if not await login.submit():
        _flush_alerts(alerts)
        return None
    bridge = await bootstrap_session(store, client)
    args._bridge = bridge
    if store.user is None:
        print("Signed in, but no profile row exists for this account.", file=sys.stderr)
        await bridge.close()
        return None
    return client, store


async def _show_list(screen: PostListScreen, alerts: AlertLog, watch: float) -> int:
    await screen.activate()
    try:
        if _flush_alerts(alerts) and not screen.posts:
            return 2
        if screen.is_empty:
            print(getattr(screen, "empty_message", "No posts."))
        else:
            _print_posts(screen.posts)
        if watch > 0:
            screen.add_listener(lambda s: None if s.loading else _print_posts(s.posts))
            await asyncio.sleep(watch)
    finally:
        await screen.deactivate()
    return 0


async def _run_feed(args: argparse.Namespace) -> int:
    alerts = AlertLog()
    signed_in = await _sign_in(args, alerts)
    if signed_in is None:
        return 2
    client, store = signed_in
    return await _show_list(FeedScreen(client, store, alerts), alerts, args.watch)


async def _run_profile(args: argparse.Namespace) -> int:
    alerts = AlertLog()
    signed_in = await _sign_in(args, alerts)
    if signed_in is None:
        return 2
    client, store = signed_in
    screen = ProfileScreen(client, store, alerts, navigate=lambda route: None)
    print(f"{store.user.display_name} <{store.user.email}>")
    return await _show_list(screen, alerts, args.watch)


async def _run_post(args: argparse.Namespace) -> int:
    alerts = AlertLog()
    signed_in = await _sign_in(args, alerts)
    if signed_in is None:
        return 2
    client, store = signed_in
    composer = CreatePostScreen(client, store, alerts)
    composer.set_content(args.content or "")
    if args.image:
        composer.pick_image(Path(args.image))
    created = await composer.submit()
    _flush_alerts(alerts)
    return 0 if created else 2


async def _run_like(args: argparse.Namespace) -> int:
    alerts = AlertLog()
    signed_in = await _sign_in(args, alerts)
    if signed_in is None:
        return 2
    client, store = signed_in
    screen = FeedScreen(client, store, alerts)
    await screen.activate()
    try:
        try:
            card = screen.card_for(args.post_id)
        except KeyError:
            print(f"Post {args.post_id} is not in the feed", file=sys.stderr)
            return 2
        await card.toggle_like()
        state = "liked" if card.liked else "not liked"
        print(f"{args.post_id}: {state}, {card.likes_count} likes")
    finally:
        await screen.deactivate()
    return 2 if _flush_alerts(alerts) else 0


async def _run_share(args: argparse.Namespace) -> int:
    alerts = AlertLog()
    signed_in = await _sign_in(args, alerts)
    if signed_in is None:
        return 2
    client, store = signed_in
    screen = FeedScreen(client, store, alerts)
    await screen.activate()
    try:
        try:
            card = screen.card_for(args.post_id)
        except KeyError:
            print(f"Post {args.post_id} is not in the feed", file=sys.stderr)
            return 2
        card.share()
        print(f"Shared {args.post_id} by {card.post.user_name}")
    finally:
        await screen.deactivate()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Developer harness for the Framez feed.")
    parser.add_argument("--email", help="Account email (default: $FRAMEZ_EMAIL).")
    parser.add_argument("--password", help="Account password (default: $FRAMEZ_PASSWORD).")
    subcommands = parser.add_subparsers(dest="command", required=True)

    feed = subcommands.add_parser("feed", help="Print the aggregated feed.")
    feed.add_argument("--watch", type=float, default=0.0, help="Keep listening for live changes for N seconds.")
    feed.set_defaults(func=_run_feed)

    profile = subcommands.add_parser("profile", help="Print your own posts.")
    profile.add_argument("--watch", type=float, default=0.0, help="Keep listening for live changes for N seconds.")
    profile.set_defaults(func=_run_profile)

    post = subcommands.add_parser("post", help="Share a new post.")
    post.add_argument("content", nargs="?", default="", help="Post text.")
    post.add_argument("--image", help="Path of a JPEG to attach.")
    post.set_defaults(func=_run_post)

    like = subcommands.add_parser("like", help="Toggle your like on a post.")
    like.add_argument("post_id", help="Id of the post to like or unlike.")
    like.set_defaults(func=_run_like)

    share = subcommands.add_parser("share", help="Share a post from the feed.")
    share.add_argument("post_id", help="Id of the post to share.")
    share.set_defaults(func=_run_share)

    return parser


async def _dispatch(args: argparse.Namespace) -> int:
    try:
        return await args.func(args)
    finally:
        bridge = getattr(args, "_bridge", None)
        if bridge is not None:
            await bridge.close()
        await close_backend_client()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "func", None)
    if handler is None:
        parser.error("Please supply a sub-command")
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    return asyncio.run(_dispatch(args))


if __name__ == "__main__":
    raise SystemExit(main())
