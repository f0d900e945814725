#!/usr/bin/env python3
"""
Smoke test of the answer pipeline against live search / LLM backends.

Run (with .env configured and documents ingested):
  python scripts/smoke_dialog.py

Options:
  --print-answers    Print full answers
  --dialog           Also run a multi-turn dialogue on one session
"""

import argparse
import asyncio
import sys
import uuid

from ragdesk.config.settings import settings
from ragdesk.container import configure_container, container
from ragdesk.core.services.chat_service import ChatService

TESTS = [
    {
        "q": "hello",
        "expect_intent": "greeting",
        "expect_none": ["[#"],
    },
    {
        "q": "What can you do?",
        "expect_intent": "meta_question",
    },
    {
        "q": "What's the weather tomorrow?",
        "expect_intent": "out_of_scope",
    },
    {
        "q": "How many vacation days do I get?",
        "expect_any": ["days", "vacation", "couldn't find"],
    },
    {
        "q": "What is the URL of the VPN gateway?",
        "expect_any": ["http", "vpn", "couldn't find"],
    },
]

DIALOGUE = [
    "How many vacation days do I get?",
    "Thanks",
    "And how do I request them?",
    "What is the link to the HR portal?",
]


def normalize(text: str) -> str:
    return (text or "").lower()


def check_expectations(result: dict, test: dict) -> list[str]:
    errors = []
    if not result.get("success"):
        return [f"request failed: {result.get('error')}"]

    ans = normalize(result.get("response"))

    expect_intent = test.get("expect_intent")
    expect_any = test.get("expect_any") or []
    expect_none = test.get("expect_none") or []

    if expect_intent and result.get("intent") != expect_intent:
        errors.append(f"intent {result.get('intent')!r} != {expect_intent!r}")

    if expect_any:
        if not any(normalize(x) in ans for x in expect_any):
            errors.append(f"missing any of: {expect_any}")

    for token in expect_none:
        if normalize(token) in ans:
            errors.append(f"should not contain: {token}")

    return errors


async def run(args) -> int:
    configure_container(settings)
    chat = container.resolve(ChatService)

    failures = 0
    for idx, test in enumerate(TESTS, start=1):
        q = test["q"]
        print(f"\nQ{idx}: {q}")
        result = await chat.handle({"question": q, "sessionId": uuid.uuid4().hex})
        if args.print_answers:
            print("A:", result.get("response") or result.get("error"))

        errors = check_expectations(result, test)
        if errors:
            failures += 1
            print("FAIL:", "; ".join(errors))
        else:
            print("OK")

    if failures:
        print(f"\nFAILED: {failures} test(s) failed")
        return 1
    print("\nALL OK")

    if args.dialog:
        session_id = uuid.uuid4().hex
        print("\nDIALOGUE:\n")
        for idx, q in enumerate(DIALOGUE, start=1):
            print(f"U{idx}: {q}")
            result = await chat.handle({"question": q, "sessionId": session_id})
            print(f"A{idx}: {result.get('response') or result.get('error')}\n")
    return 0


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--print-answers", action="store_true")
    parser.add_argument("--dialog", action="store_true")
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
