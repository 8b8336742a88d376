"""
Overwrite confirmation.

A prompt provider is any callable that returns a ``PromptAnswer`` for one
attempt. ``ask_overwrite`` keeps asking while the answer is ``REPROMPT``.
Automation can pass ``FixedPrompt`` instead of the interactive one.
"""
from __future__ import annotations

import sys
from enum import Enum

YES_ANSWERS = {"y", "yes"}
NO_ANSWERS = {"n", "no"}

PROMPT_TEXT = "Overwrite files? [Y/N] "


class PromptAnswer(Enum):
    PROCEED = "proceed"
    ABORT = "abort"
    REPROMPT = "reprompt"


def parse_answer(line):
    """
    Map one line of input to an answer.

    ``None`` means end of input and counts as a refusal.
    """
    if line is None:
        return PromptAnswer.ABORT
    token = line.strip().lower()
    if token in YES_ANSWERS:
        return PromptAnswer.PROCEED
    if token in NO_ANSWERS:
        return PromptAnswer.ABORT
    return PromptAnswer.REPROMPT


class InteractivePrompt:
    """Asks on a text stream pair, stdin/stdout by default."""

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def __call__(self):
        self.stdout.write(PROMPT_TEXT)
        self.stdout.flush()
        line = self.stdin.readline()
        # readline() returns "" only at EOF; a blank answer is "\n"
        return parse_answer(line if line else None)


class FixedPrompt:
    def __init__(self, answer):
        self.answer = answer

    def __call__(self):
        return self.answer


def ask_overwrite(prompt):
    """Returns True to proceed, False to abort."""
    while True:
        answer = prompt()
        if answer is PromptAnswer.PROCEED:
            return True
        if answer is PromptAnswer.ABORT:
            return False
