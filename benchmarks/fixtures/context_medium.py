from __future__ import annotations

from typing import Any


def build_medium_context() -> dict[str, Any]:
    """Medium context: a user profile with 20 posts and 10 tags each."""
    return {
        "user": {
            "name": "Ada Lovelace",
            "bio": "Writes <notes> & programs",
            "posts": [
                {
                    "title": f"Post {i}",
                    "body": f"Body of post {i} with <b>markup</b>",
                    "tags": [f"tag-{j}" for j in range(10)],
                    "published": i % 3 != 0,
                }
                for i in range(20)
            ],
        },
        "site": {"title": "Ledge"},
    }


MEDIUM_CONTEXT = build_medium_context()
