"""
Local heuristic extraction of audience rules from free text.

Bounded, field-specific pattern matching over a small vocabulary:
spending, visit count, recency, "<noun> count" and "between A and B" ranges.
Each candidate condition is anchored at a character offset in the prompt;
offsets decide the final condition order and which text sits between two
conditions when inferring their AND/OR connector.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from app.schemas.audience_rules import RuleCondition, RuleDocument, RuleLogic

Number = Union[int, float]

# Characters inspected on each side of a match when inferring the operator
OPERATOR_WINDOW = 20
DAYS_PER_MONTH = 30

NUMBER_RE = re.compile(r"([0-9]+(?:\.[0-9]+)?)")
SPEND_DIRECT_RE = re.compile(r"(?:spent|spending|spend)[^0-9]{0,20}?([0-9]+(?:\.[0-9]+)?)")
SPEND_OVER_RE = re.compile(r"over\s*([0-9]+(?:\.[0-9]+)?)")
VISITED_RE = re.compile(r"visited[^0-9]{0,20}?([0-9]+(?:\.[0-9]+)?)")
TIMES_RE = re.compile(r"([0-9]+(?:\.[0-9]+)?)\s*(?:times|visits)")
COUNT_RE = re.compile(
    r"([a-zA-Z_]+) (?:count|counts|number of|no of) "
    r"(?:greater than|more than|over|less than|under|>=|>|<=|<|=)?\s*([0-9]+(?:\.[0-9]+)?)"
)
BETWEEN_RE = re.compile(r"([A-Za-z ]+?) between ([0-9]+(?:\.[0-9]+)?) and ([0-9]+(?:\.[0-9]+)?)")
OR_WORD_RE = re.compile(r"\bor\b")
AND_WORD_RE = re.compile(r"\band\b")

SPEND_WORDS = ("spend", "spent", "spending")
VISIT_WORDS = ("visit", "visits", "times", "came")
RECENCY_WORDS = ("month", "months", "day", "days", "last")

SPEND_FALLBACK_KEYWORDS = ("spent", "spending", "spend", "over", "more than")
VISIT_FALLBACK_KEYWORDS = ("visit", "visits", "times", "time", "came")


@dataclass(frozen=True)
class NumberToken:
    value: Number
    index: int


@dataclass(frozen=True)
class Candidate:
    field: str
    operator: str
    value: Number
    index: int


def _to_number(raw: str) -> Optional[Number]:
    """Parsed number, or None when the digits overflow to infinity."""
    value = float(raw)
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _contains_any(text: str, words: Iterable[str]) -> bool:
    return any(word in text for word in words)


def _window(text: str, start: int, end: int) -> str:
    return text[max(0, start - OPERATOR_WINDOW):min(len(text), end + OPERATOR_WINDOW)]


def _comparison_operator(nearby: str, default: str = ">=", under_means_less: bool = True) -> str:
    if "more than" in nearby or "over" in nearby:
        return ">"
    if "less than" in nearby or (under_means_less and "under" in nearby):
        return "<"
    return default


class _PromptScanner:
    """Candidate extraction over a single lowercased prompt."""

    def __init__(self, prompt: str):
        self.text = prompt.lower()
        self.numbers: List[NumberToken] = []
        for match in NUMBER_RE.finditer(self.text):
            value = _to_number(match.group(1))
            if value is not None:
                self.numbers.append(NumberToken(value, match.start()))
        self.candidates: List[Candidate] = []

    def _add(self, field: str, operator: str, value: Number, index: int) -> None:
        self.candidates.append(Candidate(field, operator, value, index))

    def _first_keyword_index(self, keywords: Sequence[str]) -> int:
        for keyword in keywords:
            index = self.text.find(keyword)
            if index >= 0:
                return index
        return 0

    def nearest_number(self, keywords: Sequence[str]) -> Optional[NumberToken]:
        """Number closest (by character distance) to the first keyword present."""
        for keyword in keywords:
            keyword_index = self.text.find(keyword)
            if keyword_index == -1:
                continue
            best: Optional[NumberToken] = None
            best_distance = 0
            for token in self.numbers:
                distance = abs(token.index - keyword_index)
                if best is None or distance < best_distance:
                    best, best_distance = token, distance
            if best is not None:
                return best
        return None

    def _add_nearest(self, field: str, keywords: Sequence[str], default_operator: str) -> None:
        token = self.nearest_number(keywords)
        if token is None:
            return
        keyword_index = self._first_keyword_index(keywords)
        nearby = self.text[
            max(0, min(keyword_index, token.index) - OPERATOR_WINDOW):
            min(len(self.text), max(keyword_index, token.index) + OPERATOR_WINDOW)
        ]
        self._add(field, _comparison_operator(nearby, default_operator), token.value, keyword_index)

    def scan_spending(self) -> None:
        if not _contains_any(self.text, SPEND_WORDS):
            return
        value = index = None
        match = SPEND_DIRECT_RE.search(self.text)
        if match:
            value, index = _to_number(match.group(1)), match.start(1)
        else:
            match = SPEND_OVER_RE.search(self.text)
            if match and "spend" in self.text:
                value, index = _to_number(match.group(1)), match.start()

        if value is None:
            self._add_nearest("totalSpending", SPEND_FALLBACK_KEYWORDS, ">=")
            return
        operator = _comparison_operator(_window(self.text, index, index))
        self._add("totalSpending", operator, value, index)

    def scan_visits(self) -> None:
        if not _contains_any(self.text, VISIT_WORDS):
            return
        match = VISITED_RE.search(self.text) or TIMES_RE.search(self.text)
        value = _to_number(match.group(1)) if match else None
        if value is None:
            self._add_nearest("visitCount", VISIT_FALLBACK_KEYWORDS, ">=")
            return
        # "under" is not read as "<" on a direct visit match
        operator = _comparison_operator(
            _window(self.text, match.start(), match.start()), under_means_less=False
        )
        self._add("visitCount", operator, value, match.start())

    def scan_recency(self) -> None:
        if not _contains_any(self.text, RECENCY_WORDS):
            return
        token = self.nearest_number(RECENCY_WORDS)
        if token is None:
            return
        if "month" in self.text:
            days = _round_half_up(token.value) * DAYS_PER_MONTH
        else:
            days = _round_half_up(token.value)
        self._add("lastVisit", "before", days, self._first_keyword_index(RECENCY_WORDS))

    def scan_counts(self) -> None:
        for match in COUNT_RE.finditer(self.text):
            noun = match.group(1)
            nearby = _window(self.text, match.start(), match.end())
            if "greater than" in nearby or "more than" in nearby or "over" in nearby:
                operator = ">"
            elif "less than" in nearby or "under" in nearby:
                operator = "<"
            else:
                operator = ">="
            value = _to_number(match.group(2))
            if value is not None:
                self._add(f"{noun}Count", operator, value, match.start())

    def scan_ranges(self) -> None:
        for match in BETWEEN_RE.finditer(self.text):
            phrase = match.group(1).strip()
            if _contains_any(phrase, SPEND_WORDS):
                field = "totalSpending"
            elif _contains_any(phrase, ("visit", "visits", "times")):
                field = "visitCount"
            else:
                continue
            low, high = _to_number(match.group(2)), _to_number(match.group(3))
            if low is None or high is None:
                continue
            self._add(field, ">=", low, match.start())
            self._add(field, "<=", high, match.start() + 1)

    def ordered_candidates(self) -> List[Candidate]:
        """Candidates in textual order, repeated conditions collapsed to the first."""
        # Keeps "spent between 100 and 500" at two bounds: the direct spend match repeats ">= 100"
        seen = set()
        ordered = []
        for candidate in sorted(self.candidates, key=lambda c: c.index):
            key = (candidate.field, candidate.operator, candidate.value)
            if key in seen:
                continue
            seen.add(key)
            ordered.append(candidate)
        return ordered


def infer_connectors(text: str, candidates: Sequence[Candidate]) -> Optional[tuple[RuleLogic, ...]]:
    """AND/OR between each adjacent pair, read from the text separating their anchors."""
    if len(candidates) < 2:
        return None
    connectors = []
    for current, following in zip(candidates, candidates[1:]):
        between = text[current.index:following.index].strip()
        connectors.append(RuleLogic.OR if OR_WORD_RE.search(between) else RuleLogic.AND)
    return tuple(connectors)


def infer_logic(text: str, connectors: Optional[Sequence[RuleLogic]]) -> RuleLogic:
    if not connectors and OR_WORD_RE.search(text) and not AND_WORD_RE.search(text):
        return RuleLogic.OR
    return RuleLogic.AND


def extract_rules(prompt: str) -> RuleDocument:
    """Build a rule document from free text using local heuristics only."""
    scanner = _PromptScanner(prompt)
    scanner.scan_spending()
    scanner.scan_visits()
    scanner.scan_recency()
    scanner.scan_counts()
    scanner.scan_ranges()

    candidates = scanner.ordered_candidates()
    connectors = infer_connectors(scanner.text, candidates)
    return RuleDocument(
        logic=infer_logic(scanner.text, connectors),
        conditions=tuple(
            RuleCondition(field=c.field, operator=c.operator, value=c.value) for c in candidates
        ),
        connectors=connectors,
        provider=None,
    )
