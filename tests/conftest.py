"""Shared fixtures for reelfind tests."""

import pytest

from reelfind.search.models import ResultAttributes, ResultType, SearchResult


@pytest.fixture
def make_result():
    """Factory for SearchResults with facet attributes."""

    def _make(
        id: str,
        type: ResultType = ResultType.ASSET,
        relevance: float = 0.5,
        title: str | None = None,
        **attributes,
    ) -> SearchResult:
        return SearchResult(
            type=type,
            id=id,
            title=title or f"Result {id}",
            relevance=relevance,
            attributes=ResultAttributes(**attributes),
        )

    return _make


@pytest.fixture
def sarah_payload() -> list[dict]:
    """Backend payload for the query "sarah"."""
    return [
        {
            "type": "asset",
            "id": "a1",
            "title": "Interview.mp4",
            "description": "Sarah interview, take 3",
            "projectId": "p1",
            "projectName": "Q4 Launch",
            "relevance": 0.92,
            "highlights": ["Sarah interview"],
            "metadata": {
                "assetType": "video",
                "resolution": "3840x2160",
                "frameRate": 23.976,
                "codec": "prores",
                "hasTranscript": True,
                "duration": 312.5,
                "fileSize": 1073741824,
                "uploadedAt": "2024-03-15T10:00:00+00:00",
            },
        },
        {
            "type": "project",
            "id": "p1",
            "title": "Q4 Launch",
            "description": "Launch campaign with Sarah",
            "relevance": 0.81,
        },
    ]
