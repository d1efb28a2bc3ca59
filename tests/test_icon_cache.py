"""Tests for WorkItemIconCache."""

import httpx
import pytest
from conftest import json_response

from azure_devops_tree.client.icon_cache import WorkItemIconCache, icon_filename


def icon_handler(calls):
    def handler(request):
        calls.append(str(request.url))
        if "/_apis/wit/workitemtypes/" in request.url.path:
            return json_response({"icon": {"url": "https://icons.example/bug.svg"}})
        return httpx.Response(200, text="<svg>bug</svg>")

    return handler


class TestWorkItemIconCache:
    def test_filename_is_lower_case(self):
        assert icon_filename("Web", "User Story") == "web_user story.svg"

    def test_missing_directory_is_empty_cache(self, tmp_path):
        cache = WorkItemIconCache(tmp_path / "nope")

        cache.update_icon_map()

        assert cache.get_icon_uri("Web", "Bug") is None

    def test_update_icon_map_reads_directory(self, tmp_path):
        (tmp_path / "Web_Bug.svg").write_text("<svg>b</svg>", encoding="utf-8")
        cache = WorkItemIconCache(tmp_path)

        assert cache.get_icon_uri("web", "bug") is None
        cache.update_icon_map()

        assert cache.get_icon_uri("web", "bug") == "data:image/svg+xml;utf8,<svg>b</svg>"

    @pytest.mark.asyncio
    async def test_ensure_downloads_once(self, make_client, source, tmp_path):
        calls = []
        async with make_client(icon_handler(calls)) as client:
            cache = WorkItemIconCache(tmp_path / "icons", client)

            path = await cache.ensure_icon_cached(source, "Web", "Bug")
            again = await cache.ensure_icon_cached(source, "Web", "Bug")

        assert path == again == tmp_path / "icons" / "web_bug.svg"
        assert path.read_text(encoding="utf-8") == "<svg>bug</svg>"
        assert len(calls) == 2
        assert cache.get_icon_uri("Web", "Bug") == "data:image/svg+xml;utf8,<svg>bug</svg>"

    @pytest.mark.asyncio
    async def test_ensure_without_client_fails_when_missing(self, source, tmp_path):
        cache = WorkItemIconCache(tmp_path)

        with pytest.raises(RuntimeError):
            await cache.ensure_icon_cached(source, "Web", "Bug")

    def test_unreadable_files_are_skipped(self, tmp_path):
        (tmp_path / "web_bug.svg").write_text("<svg>b</svg>", encoding="utf-8")
        (tmp_path / ".DS_Store").write_bytes(b"\x00\x00\x00\x01Bud1\xff\xfe")
        (tmp_path / "web_task.svg").write_bytes(b"\xff\xfe\x00<svg")
        (tmp_path / "notes.txt").write_text("not an icon", encoding="utf-8")
        cache = WorkItemIconCache(tmp_path)

        cache.update_icon_map()

        assert cache.get_icon_uri("web", "bug") == "data:image/svg+xml;utf8,<svg>b</svg>"
        assert cache.get_icon_uri("web", "task") is None
        assert cache._icon_map.keys() == {"web_bug.svg"}
