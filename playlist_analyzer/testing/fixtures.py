"""Demo playlist fixtures for test mode.

These fixtures mirror YouTube Data API v3 responses so the service can
run without network access or credentials. Used when
APP_TESTING_TEST_MODE=true.

The demo playlist spans two pages, contains one entry that is not a
video and one video whose statistics are hidden.
"""

from typing import Any, Dict, List, Optional

DEMO_PLAYLIST_ID = "PLdemo0000000000001"
EMPTY_PLAYLIST_ID = "PLdemoEmpty0000001"
QUOTA_PLAYLIST_ID = "PLdemoQuota0000001"

SECOND_PAGE_TOKEN = "CAIQAA"


def _thumbnails(video_id: str) -> Dict[str, Any]:
    return {
        "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
        "medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"},
        "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"},
    }


def _video(
    video_id: str,
    title: str,
    duration: str,
    published_at: str,
    view_count: Optional[str],
) -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "kind": "youtube#video",
        "id": video_id,
        "snippet": {
            "title": title,
            "description": f"Demo description for {title}",
            "channelTitle": "Demo Channel",
            "publishedAt": published_at,
            "thumbnails": _thumbnails(video_id),
        },
        "contentDetails": {"duration": duration},
    }
    if view_count is not None:
        item["statistics"] = {"viewCount": view_count, "likeCount": "10"}
    return item


def _membership(video_id: str, kind: str = "youtube#video") -> Dict[str, Any]:
    resource: Dict[str, Any] = {"kind": kind}
    if kind == "youtube#video":
        resource["videoId"] = video_id
    else:
        resource["channelId"] = video_id
    return {
        "kind": "youtube#playlistItem",
        "snippet": {"title": video_id, "resourceId": resource},
    }


DEMO_VIDEOS: Dict[str, Dict[str, Any]] = {
    "dQw4w9WgXcQ": _video(
        "dQw4w9WgXcQ", "Introduction", "PT4M13S", "2009-10-25T06:57:33Z", "1000"
    ),
    "9bZkp7q19f0": _video(
        "9bZkp7q19f0", "Full Lecture", "PT1H2M10S", "2012-07-15T07:46:32Z", "2500"
    ),
    "jNQXAC9IVRw": _video("jNQXAC9IVRw", "Quick Recap", "PT59S", "2005-04-24T03:31:52Z", None),
    "kJQP7kiw5Fk": _video(
        "kJQP7kiw5Fk", "Exercises", "PT10M", "2017-01-12T19:06:32Z", "500"
    ),
}

# Membership pages of the demo playlist, in order
DEMO_PAGES: List[Dict[str, Any]] = [
    {
        "items": [
            _membership("dQw4w9WgXcQ"),
            _membership("UCdemoChannel00001", kind="youtube#channel"),
            _membership("9bZkp7q19f0"),
        ],
        "nextPageToken": SECOND_PAGE_TOKEN,
        "pageInfo": {"totalResults": 5, "resultsPerPage": 3},
    },
    {
        "items": [
            _membership("jNQXAC9IVRw"),
            _membership("kJQP7kiw5Fk"),
        ],
        "pageInfo": {"totalResults": 5, "resultsPerPage": 3},
    },
]


def _playlist(playlist_id: str, title: str, item_count: int) -> Dict[str, Any]:
    return {
        "kind": "youtube#playlist",
        "id": playlist_id,
        "snippet": {
            "title": title,
            "description": "Playlist served in test mode",
            "channelTitle": "Demo Channel",
            "publishedAt": "2020-05-01T10:00:00Z",
            "thumbnails": _thumbnails("dQw4w9WgXcQ"),
        },
        "contentDetails": {"itemCount": item_count},
    }


DEMO_PLAYLISTS: Dict[str, Dict[str, Any]] = {
    DEMO_PLAYLIST_ID: _playlist(DEMO_PLAYLIST_ID, "Demo Course: Python Basics", 5),
    EMPTY_PLAYLIST_ID: _playlist(EMPTY_PLAYLIST_ID, "Empty Playlist", 0),
    QUOTA_PLAYLIST_ID: _playlist(QUOTA_PLAYLIST_ID, "Quota Exhausted", 3),
}


def get_demo_playlist(playlist_id: str) -> Optional[Dict[str, Any]]:
    """Get the demo playlist resource, or None for unknown (private) IDs."""
    return DEMO_PLAYLISTS.get(playlist_id)


def get_demo_page(playlist_id: str, page_token: Optional[str] = None) -> Dict[str, Any]:
    """Get one membership page of a demo playlist."""
    if playlist_id != DEMO_PLAYLIST_ID:
        return {"items": [], "pageInfo": {"totalResults": 0, "resultsPerPage": 50}}
    return DEMO_PAGES[1] if page_token == SECOND_PAGE_TOKEN else DEMO_PAGES[0]


def get_demo_videos(video_ids: List[str]) -> List[Dict[str, Any]]:
    """Video resources for the given IDs; unknown IDs are omitted."""
    return [DEMO_VIDEOS[video_id] for video_id in video_ids if video_id in DEMO_VIDEOS]
