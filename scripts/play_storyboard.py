#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import httpx

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from uireel.config.runtime_config import VALID_RENDER_MODES, default_policy
from uireel.protocol import StoryboardValidationError, load_storyboard
from uireel.timeline import AssetManifest, TimelineInterpreter, build_composition


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play a storyboard and print the recorded timeline as JSON.")
    parser.add_argument("storyboard", type=Path, help="Path to a storyboard JSON file.")
    parser.add_argument("--mode", choices=sorted(VALID_RENDER_MODES), default=None, help="Render mode.")
    parser.add_argument("--assets-dir", type=Path, default=None, help="Directory of <elementId>.svg/.png assets.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for typing jitter.")
    parser.add_argument("--lenient", action="store_true", help="Skip unresolved targets instead of rejecting.")
    parser.add_argument("--composition", action="store_true", help="Emit a layer composition instead of mutations.")
    parser.add_argument("--out", type=Path, default=None, help="Write JSON here instead of stdout.")
    parser.add_argument("--base-url", default="", help="Send to a running gateway instead of playing in-process.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _remote(args: argparse.Namespace, payload: dict, assets: AssetManifest) -> tuple[int, dict]:
    body = {
        "storyboard": payload,
        "mode": args.mode,
        "assets": assets.as_dict(),
        "seed": args.seed,
        "strict": not args.lenient,
        "include_composition": args.composition,
    }
    try:
        response = httpx.post(f"{args.base_url.rstrip('/')}/v1/storyboards/play", json=body, timeout=60)
    except httpx.HTTPError as exc:
        print(f"request failed: {exc}", file=sys.stderr)
        return 2, {}
    result = response.json() if response.content else {}
    if response.status_code != 200:
        print(f"play failed ({response.status_code}): {json.dumps(result)}", file=sys.stderr)
        return 1, {}
    return 0, result.get("composition", result) if args.composition else result


def _local(args: argparse.Namespace, payload: dict, assets: AssetManifest) -> tuple[int, dict]:
    policy = default_policy()
    try:
        storyboard = load_storyboard(
            payload,
            resolve_references=not args.lenient,
            max_scenes=policy.max_scenes,
            max_actions=policy.max_actions,
        )
    except StoryboardValidationError as exc:
        for issue in exc.issues:
            print(f"{issue['path']}: {issue['message']}", file=sys.stderr)
        return 1, {}
    interpreter = TimelineInterpreter(args.mode or policy.render_mode, assets=assets, policy=policy, seed=args.seed)
    result = interpreter.play(storyboard)
    if args.composition:
        scene = storyboard.scene(result.final_scene_id) or storyboard.scenes[0]
        canvas = (policy.canvas_width, policy.canvas_height)
        return 0, build_composition(result, scene, canvas, frame_rate=policy.frame_rate, assets=assets)
    return 0, result.to_dict()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        payload = json.loads(args.storyboard.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        print(f"cannot read {args.storyboard}: {exc}", file=sys.stderr)
        return 2

    assets = AssetManifest()
    if args.assets_dir is not None and isinstance(payload, dict):
        element_ids = [
            str(element.get("id"))
            for scene in payload.get("scenes", [])
            for element in scene.get("elements", [])
            if isinstance(element, dict) and element.get("id")
        ]
        assets = AssetManifest.discover(args.assets_dir, element_ids)

    if args.base_url:
        code, output = _remote(args, payload, assets)
    else:
        code, output = _local(args, payload, assets)
    if code != 0:
        return code

    text = json.dumps(output, indent=2)
    if args.out is not None:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(text + "\n", encoding="utf-8")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
