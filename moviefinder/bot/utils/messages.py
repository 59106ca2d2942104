"""Plain-text rendering of search state for Telegram."""

from __future__ import annotations

from typing import Any

from moviefinder.domain.models import (
    ErrorState,
    FetchState,
    LoadedState,
    LoadingState,
    MovieItem,
)

# Telegram messages are limited to 4096 characters.
TELEGRAM_MESSAGE_LIMIT = 3900

LOADING_TEXT = "⏳ Loading movies..."
IDLE_TEXT = "Type a movie title to start searching."
EMPTY_TEXT = "No movies found."
DEFAULT_LISTING_TITLE = "All Movies"
MISSING = "N/A"


def listing_title(query: str | None) -> str:
    term = (query or "").strip()
    if not term:
        return DEFAULT_LISTING_TITLE
    return f'Results for "{term}"'


def _year(release_date: Any) -> str:
    if isinstance(release_date, str) and release_date:
        return release_date.split("-")[0]
    return MISSING


def _rating(vote_average: Any) -> str:
    if isinstance(vote_average, bool) or not isinstance(vote_average, (int, float)):
        return MISSING
    if not vote_average:
        return MISSING
    return f"{vote_average:.1f}"


def format_movie_card(index: int, movie: MovieItem, *, image_base_url: str) -> str:
    title = movie.get("title") or movie.get("name") or "Untitled"
    language = movie.get("original_language")
    language = language.upper() if isinstance(language, str) and language else MISSING
    line = (
        f"{index}. {title} ({_year(movie.get('release_date'))})"
        f" ⭐ {_rating(movie.get('vote_average'))} · {language}"
    )
    poster_path = movie.get("poster_path")
    if poster_path:
        line = f"{line}\n   {image_base_url}{poster_path}"
    return line


def render_fetch_state(
    state: FetchState,
    *,
    query: str | None,
    image_base_url: str,
    limit: int = 10,
) -> str:
    """Render the current fetch state as the text of the results message."""

    if isinstance(state, LoadingState):
        return LOADING_TEXT
    if isinstance(state, ErrorState):
        return state.message
    if not isinstance(state, LoadedState):
        return IDLE_TEXT

    header = listing_title(query)
    # Items that are not JSON objects have nothing to show on a card.
    movies = [movie for movie in state.results if isinstance(movie, dict)]
    if not movies:
        return f"{header}\n\n{EMPTY_TEXT}"

    cards = [
        format_movie_card(index, movie, image_base_url=image_base_url)
        for index, movie in enumerate(movies[:limit], start=1)
    ]
    text = "\n\n".join([header, *cards])
    return truncate(text)


def truncate(text: str, limit: int = TELEGRAM_MESSAGE_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return f"{text[: limit - 15].rstrip()}\n...[truncated]"


__all__ = [
    "DEFAULT_LISTING_TITLE",
    "EMPTY_TEXT",
    "IDLE_TEXT",
    "LOADING_TEXT",
    "format_movie_card",
    "listing_title",
    "render_fetch_state",
    "truncate",
]
