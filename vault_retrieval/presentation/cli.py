import argparse
import asyncio
import logging
import sys

from vault_retrieval.config.settings import settings
from vault_retrieval.container import configure_container, container
from vault_retrieval.core.errors import RetrievalError
from vault_retrieval.core.models.document import ScoredChunk, TimeRange
from vault_retrieval.core.services.retrieval_service import RetrievalService
from vault_retrieval.infrastructure.vector_stores.chroma_store import ChromaSearchIndex

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def format_result(i: int, result: ScoredChunk) -> str:
    score = "-" if result.effective_score is None else f"{result.effective_score:.3f}"
    marker = "" if result.include_in_context else " (excluded)"
    preview = result.chunk.content.replace("\n", " ")[:120]
    return (
        f"[{i}] {result.chunk.title} ({result.chunk.path}) "
        f"score={score} source={result.source.value}{marker}\n    {preview}"
    )


async def cmd_retrieve(args: argparse.Namespace) -> int:
    """Retrieve command - run one query and print ranked chunks."""
    configure_container(settings)
    service = container.resolve(RetrievalService)

    overrides = {"skip_rewrite": args.no_rewrite}
    if args.max_results:
        overrides["max_results"] = args.max_results

    try:
        time_range = None
        if args.date_from or args.date_to:
            time_range = TimeRange.from_strings(
                args.date_from or args.date_to, args.date_to or args.date_from
            )
        request = service.build_request(
            args.query,
            salient_terms=args.terms,
            time_range=time_range,
            return_all=args.all,
            **overrides,
        )
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        await container.resolve(ChromaSearchIndex).aclose()
        return 2

    try:
        results = await service.retrieve(request)
    except RetrievalError as e:
        logger.error(f"Retrieval failed: {e}")
        return 1
    finally:
        await container.resolve(ChromaSearchIndex).aclose()

    for i, result in enumerate(results, 1):
        print(format_result(i, result))
    logger.info(f"{len(results)} chunks")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vault_retrieval")
    commands = parser.add_subparsers(dest="command", required=True)

    retrieve = commands.add_parser("retrieve", help="Retrieve chunks for a query")
    retrieve.add_argument("query")
    retrieve.add_argument("--terms", nargs="*", default=[], help="Salient keywords or #tags")
    retrieve.add_argument("--from", dest="date_from", help="Start date (YYYY-MM-DD)")
    retrieve.add_argument("--to", dest="date_to", help="End date (YYYY-MM-DD)")
    retrieve.add_argument("--max-results", type=int, default=None)
    retrieve.add_argument("--all", action="store_true", help="Return all candidates")
    retrieve.add_argument("--no-rewrite", action="store_true", help="Skip query rewriting")
    return parser


def main():
    """CLI entry point."""
    args = build_parser().parse_args()

    if args.command == "retrieve":
        sys.exit(asyncio.run(cmd_retrieve(args)))


if __name__ == "__main__":
    main()
