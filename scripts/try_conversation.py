#!/usr/bin/env python3
"""
Try Conversation - Interactive client for a running proxy

This script walks through one conversation against the proxy:
1. Checks the configuration status endpoint
2. Initializes a session (the cookie is kept by the client)
3. Sends each line typed at the prompt as a message
4. Prints messages, audio refs and any extracted profile data
5. Deletes the session on exit

Usage:
    python scripts/try_conversation.py [user-id]

The proxy trusts an identity header, so the user id is sent as
X-Authenticated-User (override with CONVO_AUTH_HEADER).
"""

import asyncio
import json
import os
import sys

import httpx

PROXY_URL = os.getenv("CONVO_PROXY_URL", "http://localhost:8000")
AUTH_HEADER = os.getenv("CONVO_AUTH_HEADER", "X-Authenticated-User")


def print_banner(title: str) -> None:
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


def print_turn(data: dict) -> None:
    for message, audio in zip(data.get("messages", []), data.get("audio_refs", [])):
        print(f"🤖 {message}")
        if audio:
            print(f"   🔊 {audio}")
    if data.get("extracted_data"):
        print("📋 Profile data:")
        print(json.dumps(data["extracted_data"], indent=2))


async def main(user_id: str) -> None:
    headers = {AUTH_HEADER: user_id}

    async with httpx.AsyncClient(base_url=PROXY_URL, headers=headers, timeout=60.0) as client:
        status = (await client.get("/api/voiceflow/status")).json()
        if status.get("status") != "ready":
            print_banner("⚠️  PROXY NOT CONFIGURED")
            print(status.get("message"))
            for step in status.get("setup_instructions") or []:
                print(f"   {step}")
            sys.exit(1)

        response = await client.post("/api/voiceflow/session")
        response.raise_for_status()
        session = response.json()

        print_banner(f"💬 SESSION {session['session_id']} ({session['external_actor_id']})")
        print_turn(session)

        try:
            while True:
                line = await asyncio.to_thread(input, "\n👤 ")
                if not line.strip():
                    continue

                response = await client.post("/api/voiceflow/interact", json={"message": line})
                if response.is_error:
                    print(f"❌ {response.status_code}: {response.json()}")
                    continue

                data = response.json()
                print_turn(data)
                if data.get("is_complete"):
                    print_banner("✅ CONVERSATION COMPLETE")
                    break
        finally:
            await client.delete("/api/voiceflow/session")


if __name__ == "__main__":
    try:
        asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "demo-user"))
    except httpx.ConnectError:
        print_banner("❌ CONNECTION ERROR")
        print("Cannot connect to the proxy!")
        print("💡 Start the server with:")
        print("   uvicorn convo_proxy.transport.app:app --reload")
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        print_banner("👋 BYE")
