from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple, Union

import allure
from appium.webdriver.common.appiumby import AppiumBy
from selenium.common.exceptions import InvalidSessionIdException
from selenium.webdriver.remote.webelement import WebElement
from urllib3.exceptions import HTTPError as TransportError

from utils.logger import get_logger
from utils.session import SessionError
from utils.waiter import WaitTimeoutError, wait_for

logger = get_logger(__name__)

DEFAULT_CANDIDATE_TIMEOUT = 2000  # milliseconds, per candidate
DEFAULT_POLL_INTERVAL = 250  # milliseconds

# Raised by the client when the session or the Appium server is gone; never retried here
SESSION_LOST_ERRORS = (InvalidSessionIdException, TransportError, OSError)

ElementState = Literal["displayed", "exists"]


# ---- Exceptions ----
class SelectorError(Exception):
    """Base selector-related error."""
    pass


class InvalidLocatorError(SelectorError):
    """Raised when a locator string is in none of the supported forms."""

    def __init__(self, locator: str):
        super().__init__(
            f"Unsupported locator '{locator}': expected '~name', '//xpath', '(//xpath)', "
            f"'-ios predicate string:...', '-ios class chain:...' or 'id=...'"
        )
        self.locator = locator


class ElementNotFoundError(SelectorError):
    """Raised when no candidate locator matched within its timeout."""

    def __init__(self, message: str, attempted: Sequence[str], attempts: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.attempted = tuple(attempted)
        self.attempts = attempts or []


# ---- ResolveInfo ----
@dataclass(frozen=True)
class ResolveInfo:
    """
    Metadata returned alongside an element describing how it was resolved.
    - locator: the winning candidate
    - strategy: the AppiumBy strategy it mapped to
    - attempts: every candidate tried, in order, with its outcome
    """
    locator: str
    strategy: str
    attempts: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)


# ---- Selector: ordered fallback list ----
@dataclass(frozen=True)
class Selector:
    """
    An ordered list of candidate locators for one logical element.

    Candidates are tried first to last; the first one that matches wins.
    Each candidate gets ``candidate_timeout_ms`` (or the resolver default).
    """
    candidates: Tuple[str, ...]
    description: Optional[str] = None
    candidate_timeout_ms: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.candidates, str):
            object.__setattr__(self, "candidates", (self.candidates,))
        else:
            object.__setattr__(self, "candidates", tuple(self.candidates))
        if not self.candidates:
            raise ValueError("Selector needs at least one candidate locator")
        for candidate in self.candidates:
            to_by(candidate)

    @classmethod
    def of(cls, *locators: str, description: Optional[str] = None,
           candidate_timeout_ms: Optional[int] = None) -> "Selector":
        return cls(tuple(locators), description=description, candidate_timeout_ms=candidate_timeout_ms)

    def formatted(self, **kwargs) -> "Selector":
        """
        Replace templated placeholders in every candidate and return a new Selector.
        """

        def fmt(s: str) -> str:
            if "{" not in s:
                return s
            try:
                return s.format(**kwargs)
            except (KeyError, IndexError, ValueError) as e:
                logger.warning(f"Selector formatting failed for '{s}': {e}")
                return s

        description = fmt(self.description) if self.description else None
        return Selector(tuple(fmt(c) for c in self.candidates), description, self.candidate_timeout_ms)

    def with_timeout(self, candidate_timeout_ms: int) -> "Selector":
        return Selector(self.candidates, self.description, candidate_timeout_ms)

    def __str__(self) -> str:
        joined = " | ".join(self.candidates)
        return f"{self.description} ({joined})" if self.description else joined


SelectorLike = Union[Selector, str]


def as_selector(selector: SelectorLike) -> Selector:
    if isinstance(selector, Selector):
        return selector
    return Selector((selector,))


def to_by(locator: str) -> Tuple[str, str]:
    """Map a locator string onto an (AppiumBy strategy, value) pair."""
    if locator.startswith("~"):
        return AppiumBy.ACCESSIBILITY_ID, locator[1:]
    if locator.startswith("//") or locator.startswith("(//"):
        return AppiumBy.XPATH, locator
    if locator.startswith("-ios predicate string:"):
        return AppiumBy.IOS_PREDICATE, locator[len("-ios predicate string:"):]
    if locator.startswith("-ios class chain:"):
        return AppiumBy.IOS_CLASS_CHAIN, locator[len("-ios class chain:"):]
    if locator.startswith("id="):
        return AppiumBy.ID, locator[3:]
    raise InvalidLocatorError(locator)


def _attach_to_allure(name: str, payload: Any) -> None:
    """Attach structured info to Allure; failures are logged and ignored."""
    try:
        content = json.dumps(payload, ensure_ascii=False, indent=2, default=str)
        allure.attach(content, name=name, attachment_type=allure.attachment_type.JSON)
    except Exception:
        logger.debug("Allure attach failed for %s", name, exc_info=True)


def _match(driver, by: str, value: str, state: ElementState) -> Optional[WebElement]:
    elements = driver.find_elements(by, value)
    if state == "exists":
        return elements[0] if elements else None
    for element in elements:
        if element.is_displayed():
            return element
    return None


# ---- Public API ----
class SelectorHelper:

    @staticmethod
    def resolve(
            driver,
            selector: SelectorLike,
            state: ElementState = "displayed",
            candidate_timeout_ms: Optional[int] = None,
            interval_ms: int = DEFAULT_POLL_INTERVAL,
    ) -> Tuple[WebElement, ResolveInfo]:
        """
        Return the first candidate's element satisfying ``state`` plus how it was found.

        Raises ElementNotFoundError naming every attempted locator, InvalidLocatorError
        for malformed candidates, SessionError when the session is gone.
        """
        sel = as_selector(selector)
        if candidate_timeout_ms is None:
            candidate_timeout_ms = sel.candidate_timeout_ms
        if candidate_timeout_ms is None:
            candidate_timeout_ms = DEFAULT_CANDIDATE_TIMEOUT

        strategies = [(locator, *to_by(locator)) for locator in sel.candidates]
        attempts: List[Dict[str, Any]] = []

        for locator, by, value in strategies:
            try:
                element = wait_for(
                    lambda by=by, value=value: _match(driver, by, value, state),
                    timeout_ms=candidate_timeout_ms,
                    interval_ms=interval_ms,
                    description=f"{locator} to be {state}",
                    reraise=SESSION_LOST_ERRORS,
                )
            except SESSION_LOST_ERRORS as e:
                raise SessionError(f"Automation session lost while resolving {locator}: {e}") from e
            except WaitTimeoutError as e:
                attempts.append({
                    "locator": locator,
                    "strategy": by,
                    "success": False,
                    "elapsed_ms": round(e.elapsed_ms),
                    "error": str(e.last_error) if e.last_error else "no match",
                })
                continue

            attempts.append({"locator": locator, "strategy": by, "success": True})
            if len(attempts) > 1:
                logger.debug(f"Resolved {sel} via fallback candidate {locator}")
            return element, ResolveInfo(locator=locator, strategy=by, attempts=tuple(attempts))

        payload = {"selector": str(sel), "state": state, "attempts": attempts}
        logger.debug("Selector attempts: %s", json.dumps(payload, ensure_ascii=False))
        _attach_to_allure("selector_not_found", payload)
        raise ElementNotFoundError(
            f"No candidate matched ({state}) for {sel}; attempted: {', '.join(sel.candidates)}",
            attempted=sel.candidates,
            attempts=attempts,
        )

    @staticmethod
    def find(driver, selector: SelectorLike, state: ElementState = "displayed",
             candidate_timeout_ms: Optional[int] = None) -> WebElement:
        element, _info = SelectorHelper.resolve(driver, selector, state, candidate_timeout_ms)
        return element

    @staticmethod
    def find_all(driver, selector: SelectorLike) -> List[WebElement]:
        """
        Query every candidate once, in order, and return the first non-empty result.

        No waiting: callers use this to re-derive current screen state.
        """
        sel = as_selector(selector)
        for locator in sel.candidates:
            by, value = to_by(locator)
            try:
                elements = driver.find_elements(by, value)
            except SESSION_LOST_ERRORS as e:
                raise SessionError(f"Automation session lost while querying {locator}: {e}") from e
            if elements:
                return list(elements)
        return []

    @staticmethod
    def exists(driver, selector: SelectorLike, timeout_ms: Optional[int] = None,
               state: ElementState = "exists") -> bool:
        """
        Check whether any candidate matches.

        ``timeout_ms`` is applied per candidate; 0 means a single quick query each.
        """
        try:
            SelectorHelper.resolve(driver, selector, state, candidate_timeout_ms=timeout_ms)
            return True
        except ElementNotFoundError:
            return False
