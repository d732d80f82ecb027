"""Pipeline that turns inputs into Markdown or JSON output."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import sys
from dataclasses import dataclass
from typing import IO, Any, Optional, TextIO, Union

from .conversion import ArticleExtractor, ContentExtractor, HtmlToMarkdown, MarkdownConverter
from .core.fetcher import SafeFetcher
from .input import InputKind, InputSource, resolve_input
from .models.config import FetchmdConfig
from .render import PageRenderer
from .security.url_validator import Resolver
from .stats import Stats, compute_stats, format_stats

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Raised when no input could be converted."""


@dataclass
class ResultRecord:
    """Converted output for one input."""

    source: str
    title: str
    markdown: str
    stats: Stats
    excerpt: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"source": self.source}
        if self.title:
            data["title"] = self.title
        if self.excerpt:
            data["excerpt"] = self.excerpt
        data["markdown"] = self.markdown
        data["stats"] = self.stats.to_dict()
        return data


class Pipeline:
    """
    Converts a batch of inputs and writes the combined result.

    Inputs are processed concurrently and independently; a failed input is
    reported on stderr and skipped. Output keeps the input order.

    Example:
        pipeline = Pipeline(FetchmdConfig(stats=True))
        exit_code = await pipeline.run([InputSource.url("https://example.com")])
    """

    def __init__(
        self,
        config: Optional[FetchmdConfig] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        stdin: Optional[IO] = None,
        resolver: Optional[Resolver] = None,
        extractor: Optional[ContentExtractor] = None,
        converter: Optional[MarkdownConverter] = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration
            stdout: Stream for Markdown/JSON output (default: sys.stdout)
            stderr: Stream for errors and stats (default: sys.stderr)
            stdin: Stream for stdin inputs (default: sys.stdin.buffer)
            resolver: Async hostname -> address function for URL validation
            extractor: Article extractor (default: ArticleExtractor)
            converter: Markdown converter (default: HtmlToMarkdown)
        """
        self.config = config or FetchmdConfig()
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr
        self._stdin = stdin
        self._fetcher = SafeFetcher(budget=self.config.budget, resolver=resolver)
        self._extractor = extractor or ArticleExtractor()
        self._converter = converter or HtmlToMarkdown()

    def _transform(self, html: str, url: Optional[str]) -> tuple[str, str, Optional[str]]:
        """Return (markdown, title, excerpt) for one document."""
        if self.config.raw:
            return self._converter.convert(html, url), "", None

        extracted = self._extractor.extract(html, url)
        converted = self._converter.convert(extracted.content, url)
        title = extracted.title
        markdown = f"# {title}\n\n{converted}" if title else converted
        return markdown, title, extracted.excerpt

    async def process_one(
        self,
        source: InputSource,
        renderer: Optional[PageRenderer] = None,
    ) -> ResultRecord:
        """
        Load and convert one input.

        Raises:
            Any input, security, fetch, render or extraction error
        """
        html = await resolve_input(
            source,
            fetcher=self._fetcher,
            renderer=renderer if source.kind == InputKind.URL else None,
            stdin=self._stdin,
        )
        url_hint = source.value if source.kind == InputKind.URL else None

        # Parsing is CPU-bound; keep it off the event loop
        markdown, title, excerpt = await asyncio.to_thread(self._transform, html, url_hint)

        return ResultRecord(
            source=source.label,
            title=title,
            excerpt=excerpt,
            markdown=markdown,
            stats=compute_stats(markdown),
        )

    async def _process_safely(
        self,
        source: InputSource,
        renderer: Optional[PageRenderer],
    ) -> Union[ResultRecord, Exception]:
        try:
            return await self.process_one(source, renderer)
        except Exception as e:
            logger.debug(f"Failed to process {source.label}", exc_info=True)
            return e

    async def run(self, sources: list[InputSource]) -> int:
        """
        Convert all inputs and write the output.

        Args:
            sources: Inputs in output order

        Returns:
            0 if every input succeeded, 1 if some failed

        Raises:
            PipelineError: If there are no inputs or every input failed
            RenderError: If rendering was requested but the browser cannot start
        """
        if not sources:
            raise PipelineError("No input provided.")

        needs_browser = self.config.render_js and any(s.kind == InputKind.URL for s in sources)

        async with contextlib.AsyncExitStack() as stack:
            renderer: Optional[PageRenderer] = None
            if needs_browser:
                renderer = await stack.enter_async_context(PageRenderer(self.config.render))

            outcomes = await asyncio.gather(*(self._process_safely(s, renderer) for s in sources))

        results: list[ResultRecord] = []
        has_errors = False
        for source, outcome in zip(sources, outcomes):
            if isinstance(outcome, Exception):
                has_errors = True
                self._stderr.write(f"Error processing {source.label}: {outcome}\n")
            else:
                results.append(outcome)

        if not results:
            raise PipelineError("All inputs failed.")

        self._write_output(results, single=len(sources) == 1)

        if self.config.stats:
            self._write_stats(results)

        return 1 if has_errors else 0

    def _write_output(self, results: list[ResultRecord], single: bool) -> None:
        if self.config.json_output:
            records = [r.to_dict() for r in results]
            output: Any = records[0] if single else records
            self._stdout.write(json.dumps(output, indent=2, ensure_ascii=False) + "\n")
            return

        if len(results) == 1:
            self._stdout.write(results[0].markdown)
            return

        parts = [f"<!-- source: {r.source} -->\n\n## {r.source}\n\n{r.markdown}" for r in results]
        self._stdout.write("\n\n---\n\n".join(parts))

    def _write_stats(self, results: list[ResultRecord]) -> None:
        if len(results) == 1:
            self._stderr.write(f"{format_stats(results[0].stats)}\n")
            return

        total = Stats(words=0, tokens=0, bytes=0)
        for r in results:
            self._stderr.write(f"{r.source}: {format_stats(r.stats)}\n")
            total = total + r.stats
        self._stderr.write(f"total: {format_stats(total)}\n")
