"""Typing-practice session over AI example sentences.

The learner sees a Chinese prompt and types the English sentence word by word.
Each expected word has its own input buffer, mismatch counter, lock flag and
hint flag; these are reset whenever the active word or sentence changes.
"""
import random
import re as _re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence

from log import get_logger
from example_client import ExampleFetchError, EmptyExtraction
from models import PRACTICE_EXAMPLE_COUNT, SCENARIOS, SentenceItem

logger = get_logger("wordtype.practice")

HINT_AFTER_MISMATCHES = 3
ADVANCE_COOLDOWN = 0.6  # seconds between a correct submit and accepting "next"

_APOSTROPHES = _re.compile(r"[’‘ʼ`＇]")
_WORD_PATTERN = _re.compile(r"[A-Za-z]+(?:'[A-Za-z]+)?")
_HINT_KEY = _re.compile(r"[1-9]")


def normalize_apostrophes(text: str) -> str:
    return _APOSTROPHES.sub("'", text)


def _fold(text: str) -> str:
    return normalize_apostrophes(text).lower()


def expected_words_of(sentence: str) -> List[str]:
    return _WORD_PATTERN.findall(normalize_apostrophes(sentence or ""))


def words_match(typed: str, expected: str) -> bool:
    a, b = _fold(typed), _fold(expected)
    return a == b and len(a) == len(b)


def first_mismatch(typed: str, expected: str) -> int:
    """Index of the first character of *typed* that breaks the expected prefix, or -1."""
    target = _fold(expected)
    for k, ch in enumerate(typed):
        if k >= len(target) or target[k] != _fold(ch):
            return k
    return -1


class PracticeState(Enum):
    LOADING = "loading"
    READY = "ready"
    CHECKING = "checking"
    REVEALED = "revealed"


class KeyResult(Enum):
    INSERT = "insert"
    PASS = "pass"
    REJECTED = "rejected"
    HINT = "hint"
    SUBMITTED = "submitted"
    ADVANCE = "advance"


@dataclass
class PracticeWord:
    word: str
    example: str = ""


class ExampleFetcher(Protocol):
    async def fetch(self, word: str, count: int = ..., force: bool = ..., scenario: Optional[str] = ...) -> List[SentenceItem]:
        ...


class ChineseTranslator(Protocol):
    async def translate_to_chinese(self, text: str) -> str:
        ...


class PracticeSession:
    def __init__(
        self,
        words: Sequence[PracticeWord],
        fetcher: ExampleFetcher,
        translator: ChineseTranslator,
        start_word: Optional[str] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        cooldown: float = ADVANCE_COOLDOWN,
        on_celebrate: Optional[Callable[[], None]] = None,
        on_hint: Optional[Callable[[int], None]] = None,
    ):
        self.words = list(words)
        self.fetcher = fetcher
        self.translator = translator
        self.rng = rng or random.Random()
        self.clock = clock
        self.cooldown = cooldown
        self.on_celebrate = on_celebrate
        self.on_hint = on_hint

        self.word_index = 0
        if start_word:
            target = start_word.lower()
            for idx, entry in enumerate(self.words):
                if entry.word.lower() == target:
                    self.word_index = idx
                    break

        self.stage = 0
        self.pack: List[SentenceItem] = []
        self.pack_index = 0
        self.sentence = ""
        self.question = ""
        self.error = ""
        self.state = PracticeState.READY
        self.was_wrong = False
        self._generation = 0
        self._advance_ready_at = 0.0
        self._reset_inputs()

    # --- Derived state ---

    @property
    def current_word(self) -> Optional[PracticeWord]:
        if 0 <= self.word_index < len(self.words):
            return self.words[self.word_index]
        return None

    @property
    def scenario(self) -> str:
        return SCENARIOS[self.stage % len(SCENARIOS)]

    @property
    def expected_words(self) -> List[str]:
        return self._expected

    @property
    def answer(self) -> str:
        return " ".join(self._expected)

    def _reset_inputs(self):
        current = self.current_word
        self._expected = expected_words_of(self.sentence or (current.example if current else ""))
        n = len(self._expected)
        self.inputs = [""] * n
        self.locked = [False] * n
        self.attempts = [0] * n
        self.revealed = [False] * n
        self.focused = 0
        self.was_wrong = False

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    # --- Loading ---

    async def start(self):
        """Show the dictionary example (or the word) as a first prompt, then load a pack."""
        current = self.current_word
        if current is None:
            return
        generation = self._generation
        question = await self.translator.translate_to_chinese(current.example or current.word)
        if generation == self._generation:
            self.question = question
        await self.load()

    async def load(self, stage: Optional[int] = None) -> bool:
        """Fetch a fresh pack for the current word and stage; True if it became active."""
        current = self.current_word
        if current is None:
            return False
        if stage is not None:
            self.stage = stage % len(SCENARIOS)
        generation = self._next_generation()
        self.state = PracticeState.LOADING
        self.error = ""
        try:
            pack = await self.fetcher.fetch(current.word, PRACTICE_EXAMPLE_COUNT, force=True, scenario=self.scenario)
            if not pack:
                raise EmptyExtraction()
        except ExampleFetchError as e:
            if generation == self._generation:
                self.error = str(e)
                self.state = PracticeState.READY
            logger.warning(
                "Example pack unavailable",
                extra={"component": "practice", "word": current.word, "scenario": self.scenario, "detail": str(e)},
            )
            return False

        if generation != self._generation:
            logger.info("Discarding stale example pack", extra={"component": "practice", "word": current.word})
            return False

        self.pack = list(pack)
        self.pack_index = 0
        await self._activate(self.pack[0], generation)
        return True

    async def _activate(self, item: SentenceItem, generation: int):
        self.sentence = item.sentence
        self._reset_inputs()
        question = item.translation or await self.translator.translate_to_chinese(item.sentence)
        if generation != self._generation:
            return
        self.question = question
        self.state = PracticeState.READY

    async def advance(self, skip: bool = False) -> bool:
        """Move to the next sentence, or to the next scenario once the pack is used up.

        Without *skip* this only happens after a correct submit and its cooldown.
        """
        if self.state is PracticeState.LOADING:
            return False
        if not skip and (self.state is not PracticeState.REVEALED or self.clock() < self._advance_ready_at):
            return False

        next_index = self.pack_index + 1
        if next_index < len(self.pack):
            generation = self._next_generation()
            self.pack_index = next_index
            self.state = PracticeState.LOADING
            await self._activate(self.pack[next_index], generation)
            return True
        return await self.load(self.stage + 1)

    async def select_word(self, index: int):
        if not 0 <= index < len(self.words):
            raise IndexError(f"no word at position {index}")
        self._next_generation()
        self.word_index = index
        self.stage = 0
        self.pack = []
        self.pack_index = 0
        self.sentence = ""
        self.question = ""
        self.error = ""
        self.state = PracticeState.READY
        self._reset_inputs()
        await self.start()

    async def next_word(self):
        if self.words:
            await self.select_word((self.word_index + 1) % len(self.words))

    def close(self):
        """Drop the session; responses still in flight are ignored."""
        self._next_generation()

    # --- Typing ---

    def on_input(self, index: int, value: str):
        """Apply a new value for one word's input buffer."""
        if self.state is PracticeState.REVEALED or not 0 <= index < len(self.inputs):
            return
        expected = self._expected[index]
        self.inputs[index] = value
        self.was_wrong = False
        if self.state is PracticeState.CHECKING:
            self.state = PracticeState.READY

        if first_mismatch(value, expected) != -1:
            self.attempts[index] += 1
            self.locked[index] = True
            if self.attempts[index] >= HINT_AFTER_MISMATCHES and not self.revealed[index]:
                self._reveal(index)
        else:
            self.locked[index] = False

        if words_match(value, expected) and index < len(self.inputs) - 1:
            self.focused = index + 1

    def on_key(self, index: int, key: str) -> KeyResult:
        """Classify a key press for word *index* before it reaches the input."""
        if _HINT_KEY.fullmatch(key):
            self.reveal_hints(int(key))
            return KeyResult.HINT
        if key == "Enter":
            if self.state is PracticeState.REVEALED:
                return KeyResult.ADVANCE
            self.submit()
            return KeyResult.SUBMITTED
        if key == " ":
            return KeyResult.REJECTED
        if len(key) == 1:
            if not 0 <= index < len(self.inputs) or self.state is PracticeState.REVEALED:
                return KeyResult.REJECTED
            if key.isdigit():
                return KeyResult.INSERT
            if self.locked[index] and not self.revealed[index]:
                return KeyResult.REJECTED
            return KeyResult.INSERT
        return KeyResult.PASS

    def type_key(self, index: int, key: str) -> KeyResult:
        """Route a key through on_key and apply the edit it allows."""
        result = self.on_key(index, key)
        if result is KeyResult.INSERT:
            self.on_input(index, self.inputs[index] + key)
        elif result is KeyResult.PASS and key == "Backspace" and 0 <= index < len(self.inputs) and self.inputs[index]:
            self.on_input(index, self.inputs[index][:-1])
        return result

    def focus(self, index: int):
        if 0 <= index < len(self.inputs):
            self.focused = index

    def submit(self) -> bool:
        if self.state in (PracticeState.LOADING, PracticeState.REVEALED):
            return False
        expected = self._expected
        if all(words_match(self.inputs[i], w) for i, w in enumerate(expected)):
            self.state = PracticeState.REVEALED
            self.was_wrong = False
            self._advance_ready_at = self.clock() + self.cooldown
            if self.on_celebrate:
                self.on_celebrate()
            return True
        self.state = PracticeState.CHECKING
        self.was_wrong = True
        return False

    # --- Hints ---

    def _reveal(self, index: int):
        self.revealed[index] = True
        if self.on_hint:
            self.on_hint(index)

    def reveal_hints(self, count: int) -> List[int]:
        """Reveal up to *count* random words whose hint is still hidden."""
        hidden = [i for i, shown in enumerate(self.revealed) if not shown]
        count = max(0, min(count, len(hidden)))
        chosen = sorted(self.rng.sample(hidden, count))
        for i in chosen:
            self._reveal(i)
        return chosen
