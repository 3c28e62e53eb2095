"""In-memory stand-ins for the youtube/v3 resource and a requests session."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import httplib2
from googleapiclient.errors import HttpError


def http_error(status: int, reason: str = "", message: str = "") -> HttpError:
    body = {
        "error": {
            "code": status,
            "message": message or f"HTTP {status}",
            "errors": [{"reason": reason, "message": message}] if reason else [],
        }
    }
    resp = httplib2.Response({"status": status})
    return HttpError(resp, json.dumps(body).encode("utf-8"))


def raw_item(video_id: str, title: Optional[str] = None, **snippet: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "title": title if title is not None else f"Video {video_id}",
        "resourceId": {"kind": "youtube#video", "videoId": video_id},
        "channelTitle": "Some Channel",
        "publishedAt": "2024-01-01T00:00:00Z",
        "thumbnails": {"medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mq.jpg"}},
    }
    data.update(snippet)
    return {"kind": "youtube#playlistItem", "snippet": data}


def raw_items(n: int, prefix: str = "vid") -> List[Dict[str, Any]]:
    return [raw_item(f"{prefix}{i:04d}") for i in range(n)]


class _Request:
    def __init__(self, fn: Callable[[], Any]) -> None:
        self._fn = fn

    def execute(self) -> Any:
        return self._fn()


class _Collection:
    def __init__(self, owner: "FakeYouTube", name: str) -> None:
        self.owner = owner
        self.name = name

    def list(self, **kwargs: Any) -> _Request:
        return _Request(lambda: self.owner.respond(self.name, kwargs))


class FakeYouTube:
    """
    playlists:    playlist_id -> snippet dict (+ optional "itemCount")
    items:        playlist_id -> list of raw playlistItems
    videos:       video_id -> status dict (absent = deleted video)
    errors:       endpoint -> queue of exceptions (None = answer normally)
    """

    def __init__(
        self,
        playlists: Optional[Dict[str, Dict[str, Any]]] = None,
        items: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        videos: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> None:
        self.playlist_meta = playlists or {}
        self.items = items or {}
        self.video_status = videos or {}
        self.errors: Dict[str, List[Optional[Exception]]] = {}
        self.calls: List[tuple[str, Dict[str, Any]]] = []

    def playlists(self) -> _Collection:
        return _Collection(self, "playlists")

    def playlistItems(self) -> _Collection:
        return _Collection(self, "playlistItems")

    def videos(self) -> _Collection:
        return _Collection(self, "videos")

    def calls_to(self, name: str) -> List[Dict[str, Any]]:
        return [kw for n, kw in self.calls if n == name]

    def respond(self, name: str, kwargs: Dict[str, Any]) -> Any:
        self.calls.append((name, kwargs))
        queue = self.errors.get(name)
        if queue:
            err = queue.pop(0)
            if err is not None:
                raise err
        return getattr(self, f"_{name}")(kwargs)

    def _playlists(self, kw: Dict[str, Any]) -> Dict[str, Any]:
        meta = self.playlist_meta.get(kw["id"])
        if meta is None:
            return {"items": []}
        snippet = {k: v for k, v in meta.items() if k != "itemCount"}
        return {
            "items": [
                {
                    "id": kw["id"],
                    "snippet": snippet,
                    "contentDetails": {"itemCount": meta.get("itemCount", 0)},
                }
            ]
        }

    def _playlistItems(self, kw: Dict[str, Any]) -> Dict[str, Any]:
        items = self.items.get(kw["playlistId"], [])
        size = kw.get("maxResults", 50)
        start = int(kw.get("pageToken") or 0)
        resp: Dict[str, Any] = {
            "items": items[start : start + size],
            "pageInfo": {"totalResults": len(items), "resultsPerPage": size},
        }
        if start + size < len(items):
            resp["nextPageToken"] = str(start + size)
        return resp

    def _videos(self, kw: Dict[str, Any]) -> Dict[str, Any]:
        ids = kw["id"].split(",")
        return {
            "items": [
                {"id": vid, "status": self.video_status[vid]}
                for vid in ids
                if vid in self.video_status
            ]
        }


PUBLIC = {"uploadStatus": "processed", "privacyStatus": "public"}
PRIVATE = {"uploadStatus": "processed", "privacyStatus": "private"}
NO_UPLOAD = {"privacyStatus": "public"}


def client_for(fake: FakeYouTube, **kwargs: Any):
    from scenevault.providers.youtube import YouTubeDataClient

    kwargs.setdefault("sleep", lambda s: None)
    return YouTubeDataClient("AIzaTEST-key-0123456789", youtube=fake, **kwargs)


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        text: str = "",
        headers: Optional[Dict[str, str]] = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text else (json.dumps(payload) if payload is not None else "")
        self.content = self.text.encode("utf-8")
        self.headers = headers or {}
        self.url = url

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    """Records requests and answers from a queue of FakeResponse objects."""

    def __init__(self, responses: Optional[List[Any]] = None) -> None:
        self.responses = list(responses or [])
        self.requests: List[Dict[str, Any]] = []
        self.headers: Dict[str, str] = {}

    def _next(self) -> Any:
        resp = self.responses.pop(0) if self.responses else FakeResponse(200, [])
        if isinstance(resp, Exception):
            raise resp
        return resp

    def request(self, method: str, url: str, **kwargs: Any) -> Any:
        self.requests.append({"method": method, "url": url, **kwargs})
        return self._next()

    def get(self, url: str, **kwargs: Any) -> Any:
        self.requests.append({"method": "GET", "url": url, **kwargs})
        return self._next()
