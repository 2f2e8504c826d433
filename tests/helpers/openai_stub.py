"""Test helper to stub the OpenAI Responses client used by ``assistant.py``.

The stub records every ``responses.create`` call and answers with text built
by a caller-provided ``reply`` callable, so tests can assert on both the
prompt that was sent and the answer that came back.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class OpenAIStub:
    """Minimal stub matching the ``openai.OpenAI`` shape for ``assistant.py``.

    Parameters
    ----------
    reply:
        Receives the ``input`` string sent to the model and returns the
        ``output_text`` of the fake response. Defaults to a fixed answer.
    calls_out:
        A list that will be appended with each call's kwargs to allow tests to
        make lightweight assertions about the prompt.
    """

    def __init__(
        self,
        reply: Callable[[str], str] | None = None,
        calls_out: list[dict[str, Any]] | None = None,
    ) -> None:
        self._reply = reply or (lambda _input: "You spent the most on Food & Dining.")
        self._calls = calls_out if calls_out is not None else []

        class _Responses:
            def __init__(self, outer: OpenAIStub) -> None:
                self._outer = outer

            def create(self, **kwargs):
                self._outer._calls.append(kwargs)

                class _Resp:
                    output_text: str

                resp = _Resp()
                resp.output_text = self._outer._reply(kwargs["input"])
                return resp

        self.responses = _Responses(self)

    # Expose the captured calls list for assertions
    @property
    def calls(self) -> list[dict[str, Any]]:
        return self._calls
