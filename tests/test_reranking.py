import pytest

from vault_retrieval.core.errors import RerankError
from vault_retrieval.core.models.document import ChunkSource, ScoredChunk
from vault_retrieval.core.services.reranking import ConfidenceGatedReranker, max_score

from conftest import FakeReranker, make_chunk


def candidate(path, score, content=None, source=ChunkSource.SEARCH):
    return ScoredChunk(
        chunk=make_chunk(path, content or f"content of {path}"),
        score=score,
        include_in_context=True,
        source=source,
    )


class TestTrigger:
    @pytest.mark.asyncio
    async def test_low_confidence_triggers(self):
        reranker = FakeReranker()
        gate = ConfidenceGatedReranker(reranker)

        await gate.maybe_rerank("q", [candidate("a.md", 0.3), candidate("b.md", 0.1)], 0.5)

        assert len(reranker.calls) == 1

    @pytest.mark.asyncio
    async def test_high_confidence_skips(self):
        reranker = FakeReranker()
        gate = ConfidenceGatedReranker(reranker)
        candidates = [candidate("a.md", 0.7), candidate("b.md", 0.1)]

        result = await gate.maybe_rerank("q", candidates, 0.5)

        assert result is candidates
        assert reranker.calls == []

    @pytest.mark.parametrize(
        "scores,threshold,expected",
        [
            ([0.0, 0.0], 0.5, False),
            ([], 0.5, False),
            ([0.3], None, False),
            ([0.5], 0.5, False),
            ([0.49], 0.5, True),
        ],
    )
    def test_should_rerank_boundaries(self, scores, threshold, expected):
        gate = ConfidenceGatedReranker(FakeReranker())
        candidates = [candidate(f"{i}.md", s) for i, s in enumerate(scores)]

        assert gate.should_rerank(candidates, threshold) is expected

    def test_max_score_ignores_unscored_chunks(self):
        candidates = [
            candidate("e.md", None, source=ChunkSource.EXPLICIT),
            candidate("a.md", 0.2),
        ]
        assert max_score(candidates) == 0.2
        assert max_score([candidate("e.md", None, source=ChunkSource.EXPLICIT)]) == 0.0


class TestRerank:
    @pytest.mark.asyncio
    async def test_response_order_and_scores_applied(self):
        candidates = [candidate("a.md", 0.3), candidate("b.md", 0.2), candidate("c.md", 0.1)]
        gate = ConfidenceGatedReranker(FakeReranker(order=[(2, 0.9), (0, 0.4), (1, 0.2)]))

        result = await gate.rerank("q", candidates)

        assert [r.chunk.path for r in result] == ["c.md", "a.md", "b.md"]
        assert [r.rerank_score for r in result] == [0.9, 0.4, 0.2]
        assert result[0].score == 0.1
        assert result[0].effective_score == 0.9

    @pytest.mark.asyncio
    async def test_omitted_candidate_dropped(self):
        candidates = [candidate("a.md", 0.3), candidate("b.md", 0.2), candidate("c.md", 0.1)]
        gate = ConfidenceGatedReranker(FakeReranker(order=[(1, 0.8), (0, 0.5)]))

        result = await gate.maybe_rerank("q", candidates, 0.5)

        assert [r.chunk.path for r in result] == ["b.md", "a.md"]

    @pytest.mark.asyncio
    async def test_content_truncated(self):
        reranker = FakeReranker()
        gate = ConfidenceGatedReranker(reranker, max_chars=10)

        await gate.rerank("q", [candidate("a.md", 0.2, content="x" * 50)])

        _, contents = reranker.calls[0]
        assert contents == ["x" * 10]

    @pytest.mark.asyncio
    async def test_out_of_range_and_repeated_indices_ignored(self):
        gate = ConfidenceGatedReranker(FakeReranker(order=[(5, 0.9), (0, 0.7), (0, 0.6)]))

        result = await gate.rerank("q", [candidate("a.md", 0.2)])

        assert [(r.chunk.path, r.rerank_score) for r in result] == [("a.md", 0.7)]

    @pytest.mark.asyncio
    async def test_min_relevance_excludes_from_context(self):
        gate = ConfidenceGatedReranker(
            FakeReranker(order=[(0, 0.8), (1, 0.05)]), min_relevance=0.1
        )

        result = await gate.rerank("q", [candidate("a.md", 0.2), candidate("b.md", 0.1)])

        assert [r.include_in_context for r in result] == [True, False]

    @pytest.mark.asyncio
    async def test_reranker_error_propagates(self):
        gate = ConfidenceGatedReranker(FakeReranker(error=TimeoutError("rerank timed out")))

        with pytest.raises(RerankError):
            await gate.maybe_rerank("q", [candidate("a.md", 0.2)], 0.5)
