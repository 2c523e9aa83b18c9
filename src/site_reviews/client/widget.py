"""ReviewsWidget — fetches, renders and submits reviews for one entity page.

The widget never publishes optimistically: a successful submission only
shows the server's confirmation and refetches the approved list. Any list
failure fails closed to an empty list with ``load_failed`` set.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum

import httpx
import pydantic
import structlog
from pydantic import BaseModel, ConfigDict, Field, StrictInt

from site_reviews.client.render import WidgetView, build_view
from site_reviews.client.response import SUBMIT_FAILED_MESSAGE, extract_error_detail
from site_reviews.config import settings

logger = structlog.get_logger(__name__)

SUBMITTED_FALLBACK_MESSAGE = "Submitted. Once approved, it will appear publicly on this page."


def _empty_summary() -> dict:
    return {"count": 0, "average": None, "distribution": {str(score): 0 for score in range(1, 6)}}


class ListedReview(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    rating: int
    displayName: str
    body: str
    createdAt: str


class ListSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    count: StrictInt = Field(ge=0)
    average: float | None = None
    distribution: dict[str, int] = Field(default_factory=dict)


class ListPayload(BaseModel):
    """Shape a list response must have before the widget shows any of it."""

    model_config = ConfigDict(extra="ignore")

    reviews: list[ListedReview]
    summary: ListSummary


class WidgetStatus(Enum):
    IDLE = "idle"
    OK = "ok"
    ERROR = "err"


@dataclass
class ReviewForm:
    rating: int = 5
    display_name: str = ""
    body: str = ""
    honeypot: str = ""

    def clear(self) -> None:
        self.rating = 5
        self.display_name = ""
        self.body = ""
        self.honeypot = ""


@dataclass
class WidgetState:
    sort: str = "newest"
    reviews: list[dict] = field(default_factory=list)
    summary: dict = field(default_factory=_empty_summary)
    loading: bool = False
    load_failed: bool = False
    submitting: bool = False
    status: WidgetStatus = WidgetStatus.IDLE
    status_message: str = ""
    form: ReviewForm = field(default_factory=ReviewForm)


class ReviewsWidget:
    def __init__(
        self,
        http: httpx.Client,
        site_slug: str,
        entity_type: str,
        entity_slug: str,
        entity_name: str,
        sort: str = "newest",
        path_prefix: str = "/reviews",
    ):
        self.http = http
        self.entity_name = entity_name
        self.endpoint = f"{path_prefix}/{site_slug}/{entity_type}/{entity_slug}"
        self.state = WidgetState(sort=sort)
        self._fetch_lock = threading.Lock()
        self._submit_lock = threading.Lock()

    @classmethod
    def connect(cls, base_url: str, site_slug, entity_type, entity_slug, entity_name, timeout=None, **kwargs):
        if timeout is None:
            timeout = settings()["client"]["timeout_seconds"]
        http = httpx.Client(base_url=base_url, timeout=timeout)
        return cls(http, site_slug, entity_type, entity_slug, entity_name, **kwargs)

    # -------------------------------------------------------------------
    # List
    # -------------------------------------------------------------------
    def refresh(self) -> WidgetState:
        """Fetch the approved list for the current sort.

        Only one fetch runs at a time; a call made while one is in flight
        returns the current state untouched.
        """
        if not self._fetch_lock.acquire(blocking=False):
            return self.state

        try:
            self.state.loading = True
            try:
                response = self.http.get(
                    self.endpoint,
                    params={"sort": self.state.sort},
                    headers={"Cache-Control": "no-store"},
                )
                response.raise_for_status()
                payload = response.json()
                ListPayload.model_validate(payload)
                reviews, summary = payload["reviews"], payload["summary"]
            except (httpx.HTTPError, pydantic.ValidationError, ValueError) as exc:
                logger.warning("widget.load_failed", endpoint=self.endpoint, error=str(exc))
                self.state.reviews = []
                self.state.summary = _empty_summary()
                self.state.load_failed = True
            else:
                self.state.reviews = reviews
                self.state.summary = summary
                self.state.load_failed = False
            finally:
                self.state.loading = False
        finally:
            self._fetch_lock.release()

        return self.state

    def set_sort(self, sort: str) -> WidgetState:
        self.state.sort = sort
        return self.refresh()

    # -------------------------------------------------------------------
    # Submit
    # -------------------------------------------------------------------
    def submit(self, rating=None, display_name=None, body=None, honeypot=None) -> WidgetState:
        """Send the form. Ignored while an earlier submission is still outstanding."""
        if not self._submit_lock.acquire(blocking=False):
            return self.state

        form = self.state.form
        if rating is not None:
            form.rating = rating
        if display_name is not None:
            form.display_name = display_name
        if body is not None:
            form.body = body
        if honeypot is not None:
            form.honeypot = honeypot

        accepted = False
        try:
            self.state.submitting = True
            self.state.status = WidgetStatus.IDLE
            self.state.status_message = ""
            try:
                response = self.http.post(
                    self.endpoint,
                    json={
                        "rating": form.rating,
                        "displayName": form.display_name,
                        "body": form.body,
                        "honeypot": form.honeypot,
                    },
                )
            except httpx.HTTPError as exc:
                logger.warning("widget.submit_failed", endpoint=self.endpoint, error=str(exc))
                self.state.status = WidgetStatus.ERROR
                self.state.status_message = SUBMIT_FAILED_MESSAGE
            else:
                if response.is_success:
                    accepted = True
                    self.state.status = WidgetStatus.OK
                    self.state.status_message = _confirmation(response)
                    form.clear()
                else:
                    self.state.status = WidgetStatus.ERROR
                    self.state.status_message = extract_error_detail(response)
        finally:
            self.state.submitting = False
            self._submit_lock.release()

        if accepted:
            self.refresh()
        return self.state

    def view(self) -> WidgetView:
        return build_view(self.state, self.entity_name)


def _confirmation(response: httpx.Response) -> str:
    try:
        message = response.json().get("message")
    except (ValueError, AttributeError):
        message = None
    return message if isinstance(message, str) and message else SUBMITTED_FALLBACK_MESSAGE
