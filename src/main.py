"""Main entrypoint: interactive manuscript drafting in the terminal."""

import argparse
import asyncio
import logging

from src.config import settings
from src.errors.exceptions import NovusError
from src.providers.chat_model import ChatModelProvider
from src.session import ManuscriptSession
from src.state.enums import SectionKind, SectionStatus, TransformKind


COMMANDS = """Commands:
  /analyze                      - Run the novelty/gap analysis
  /draft <section>              - Draft one section (e.g. /draft introduction)
  /draft-all                    - Draft every section except the title
  /transform <section> <kind>   - Apply Expand, Condense, FixGrammar or MakeRigorous
  /ask <question>               - Ask the publication advisor
  /show                         - Show the blueprint and section status
  /export [path]                - Write the draft as markdown
  /quit                         - Exit"""


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m src.main",
        description="Draft an academic manuscript from source documents.",
    )
    parser.add_argument("files", nargs="*", help="PDF, text, markdown or LaTeX source documents")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def format_overview(session: ManuscriptSession) -> str:
    """Blueprint summary and per-section status."""
    state = session.state
    lines = [f"Documents: {', '.join(d.name for d in state.documents) or '(none)'}"]

    analysis = state.analysis
    if analysis is None:
        lines.append("Analysis: not run yet")
    else:
        lines.append(f"Title: {analysis.title}")
        lines.append(f"Target journal: {analysis.target_venue}")
        lines.append(f"Gap: {analysis.gap}")
        lines.append(f"Novelty: {analysis.novelty}")
        for name, value in analysis.checklist.model_dump().items():
            lines.append(f"  [{name}] {value}")

    lines.append("Sections:")
    for section in state.sections:
        marker = "..." if section.status == SectionStatus.GENERATING else ""
        line = f"  {section.id:<20} {section.status.value:<10} {len(section.content):>6} chars {marker}"
        lines.append(line.rstrip())
        if section.last_error:
            lines.append(f"    ! {section.last_error}")
    if state.last_error:
        lines.append(f"Last error: {state.last_error}")
    return "\n".join(lines)


def resolve_section_id(name: str) -> str:
    """Accept a section id ("literature_review") or display name ("Literature Review")."""
    for kind in SectionKind:
        if name.lower() in (kind.section_id, kind.value.lower()):
            return kind.section_id
    return name


async def handle_command(session: ManuscriptSession, user_input: str) -> str:
    """Run one CLI command and return the text to print."""
    command, _, argument = user_input.partition(" ")
    command = command.lower()
    argument = argument.strip()

    if command == "/analyze":
        analysis = await session.run_analysis()
        return f"Blueprint ready: {analysis.title}\n\n{format_overview(session)}"

    if command == "/draft":
        if not argument:
            return "Usage: /draft <section>"
        section = await session.generate_section(resolve_section_id(argument))
        if section.last_error:
            return section.last_error
        return f"## {section.title}\n\n{section.content}"

    if command == "/draft-all":
        sections = await session.generate_sections()
        return "\n".join(
            f"{s.id}: {s.last_error or s.status.value}" for s in sections
        )

    if command == "/transform":
        parts = argument.split()
        if len(parts) != 2:
            kinds = ", ".join(k.value for k in TransformKind)
            return f"Usage: /transform <section> <kind>  (kind: {kinds})"
        section = await session.transform_section(resolve_section_id(parts[0]), parts[1])
        return f"## {section.title}\n\n{section.content}"

    if command == "/ask":
        if not argument:
            return "Usage: /ask <question>"
        return await session.ask_advisor(argument)

    if command == "/show":
        return format_overview(session)

    if command == "/export":
        result = session.export_markdown(argument or None)
        return f"Exported {len(result.sections)} sections to {result.path}"

    return f"Unknown command: {command}\n\n{COMMANDS}"


async def interactive_loop(session: ManuscriptSession) -> None:
    while True:
        try:
            user_input = (await asyncio.to_thread(input, "\n📝 You: ")).strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\nGoodbye!")
            break

        if not user_input:
            continue

        if user_input.lower() == "/quit":
            print("Goodbye!")
            break

        if not user_input.startswith("/"):
            user_input = f"/ask {user_input}"

        try:
            print(f"\n{await handle_command(session, user_input)}")
        except NovusError as e:
            print(f"\n❌ {e.message}")
        except ValueError as e:
            print(f"\n❌ Error: {e}")


def main(argv: list[str] | None = None):
    """Interactive CLI for drafting a manuscript."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("Novus Academica - LangGraph + Anthropic Claude")
    print("=" * 60)

    errors = settings.validate()
    if errors:
        print("\n⚠️  Configuration Issues:")
        for error in errors:
            print(f"   - {error}")
        print("\nPlease check your .env file.")
        return

    print("\n✅ Configuration valid")
    print(f"   Preferred model: {settings.preferred_model}")
    print(f"   Fast model: {settings.fast_model}")
    print(f"   LangSmith Tracing: {settings.langsmith_tracing}")
    print(f"   Project: {settings.langsmith_project}")

    session = ManuscriptSession(ChatModelProvider(settings=settings))
    report = session.add_files(args.files)
    for name in report.accepted:
        print(f"   + {name}")
    for message in report.rejected:
        print(f"   ⚠️  {message}")

    print(f"\n{COMMANDS}")
    print("  <question>                    - Same as /ask")
    print("-" * 60)

    asyncio.run(interactive_loop(session))


if __name__ == "__main__":
    main()
