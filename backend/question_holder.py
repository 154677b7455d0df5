from typing import Optional


def normalize_answer(text: str) -> str:
    return text.strip().lower()


class QuestionHolder:
    """Holds the current round's prompt and its secret answer."""

    def __init__(self):
        self.prompt: Optional[str] = None
        self.answer: Optional[str] = None  # normalized, used for matching
        self.display_answer: Optional[str] = None  # trimmed, as the master typed it

    def set(self, prompt: str, raw_answer: str):
        self.prompt = prompt
        self.answer = normalize_answer(raw_answer)
        self.display_answer = raw_answer.strip()

    def check(self, raw_guess: str) -> bool:
        if self.answer is None or not isinstance(raw_guess, str):
            return False
        return normalize_answer(raw_guess) == self.answer

    def clear(self):
        self.prompt = None
        self.answer = None
        self.display_answer = None

    def is_set(self) -> bool:
        return self.answer is not None
