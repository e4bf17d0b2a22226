#!/usr/bin/env python3
"""
Basic Workflow Example

Demonstrates a manuscript drafting session from start to finish:
upload sources, run the novelty/gap analysis, draft every section and
export the result as markdown.

Usage:
    python examples/basic_workflow.py paper.pdf notes.md [more sources...]
"""

import asyncio
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.config import settings
from src.errors import NovusError
from src.providers import ChatModelProvider
from src.session import ManuscriptSession


async def main(paths: list[str]):
    """Run a complete drafting session."""
    print("=" * 60)
    print("Novus Academica - Basic Workflow Example")
    print("=" * 60)

    errors = settings.validate()
    if errors:
        print("\n".join(f"- {e}" for e in errors))
        return

    session = ManuscriptSession(ChatModelProvider())
    report = session.add_files(paths)
    for message in report.rejected:
        print(f"[Skipped] {message}")
    print(f"[Sources] {', '.join(report.accepted) or '(none)'}")

    try:
        print("\n[Analysis]")
        analysis = await session.run_analysis()
        print(f"Title: {analysis.title}")
        print(f"Target Journal: {analysis.target_venue}")
        print(f"Gap: {analysis.gap}")

        print("\n[Drafting]")
        for section in await session.generate_sections():
            print(f"{section.title}: {section.last_error or f'{len(section.content)} chars'}")

        result = session.export_markdown()
        print(f"\n[Exported] {result.path}")

    except NovusError as e:
        print(f"\n[Error] Workflow failed: {e.message}")
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(sys.argv[1:]))
