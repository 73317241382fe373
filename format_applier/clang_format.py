"""
clang-format integration — builds the command line, runs the formatter on
the document bytes and parses its XML replacement list into an EditBatch.

clang-format is asked for ``--output-replacements-xml``, which looks like::

    <?xml version='1.0'?>
    <replacements xml:space='preserve' incomplete_format='false'>
    <cursor>6</cursor>
    <replacement offset='3' length='3'> </replacement>
    </replacements>
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field

from lxml import etree

from .editing.edits import Edit, EditBatch
from .editing.restriction import Restriction
from .errors import MalformedOutput
from .process import Runner, run_process

logger = logging.getLogger(__name__)

DEFAULT_BINARY = "clang-format"


def find_clang_format() -> str | None:
    """Return the path of the clang-format executable on PATH, if any."""
    return shutil.which(DEFAULT_BINARY)


@dataclass(frozen=True)
class FormatOptions:
    """Style settings for one formatting call."""
    style: str | None = None
    fallback_style: str | None = None
    assume_filename: str | None = None


@dataclass
class FormatRequest:
    """Everything clang-format needs for one invocation."""
    content: bytes
    restriction: Restriction
    options: FormatOptions = field(default_factory=FormatOptions)
    cursor: int | None = None   # byte offset


def _int_attribute(element, name: str) -> int:
    value = element.get(name)
    if value is None:
        raise MalformedOutput(
            f"<{element.tag}> on line {element.sourceline} is missing "
            f"the '{name}' attribute"
        )
    try:
        number = int(value)
    except ValueError as exc:
        raise MalformedOutput(
            f"<{element.tag}> has a non-integer {name}={value!r}"
        ) from exc
    if number < 0:
        raise MalformedOutput(f"<{element.tag}> has a negative {name}={number}")
    return number


def parse_replacements(xml: bytes) -> EditBatch:
    """Parse clang-format's replacement XML into an EditBatch.

    Raises
    ------
    MalformedOutput
        The document is not well-formed XML, is not a ``<replacements>``
        list, or a replacement/cursor element is incomplete.
    """
    if not xml.strip():
        raise MalformedOutput("formatter produced no output")

    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise MalformedOutput(f"formatter output is not valid XML: {exc}") from exc

    if root.tag != "replacements":
        raise MalformedOutput(
            f"expected <replacements> root element, got <{root.tag}>"
        )

    batch = EditBatch(incomplete=root.get("incomplete_format") == "true")
    seen_cursor = False

    for element in root:
        if not isinstance(element.tag, str):
            continue  # comments and processing instructions
        if element.tag == "replacement":
            if len(element):
                raise MalformedOutput(
                    f"<replacement> on line {element.sourceline} has more "
                    f"than one child"
                )
            batch.edits.append(Edit(
                offset=_int_attribute(element, "offset"),
                length=_int_attribute(element, "length"),
                text=element.text or None,
            ))
        elif element.tag == "cursor":
            if seen_cursor:
                raise MalformedOutput("more than one <cursor> element")
            seen_cursor = True
            try:
                batch.cursor = int((element.text or "").strip())
            except ValueError as exc:
                raise MalformedOutput(
                    f"<cursor> is not a decimal offset: {element.text!r}"
                ) from exc
        else:
            logger.debug("[Format] Ignoring unknown element <%s>", element.tag)

    return batch


class ClangFormat:
    """Run clang-format as a black box and return its edits."""

    def __init__(self, binary: str = DEFAULT_BINARY, runner: Runner = run_process) -> None:
        self.binary = binary
        self._runner = runner

    def build_command(self, request: FormatRequest) -> list[str]:
        command = [self.binary, "--output-replacements-xml"]
        options = request.options
        if options.style:
            command.append(f"--style={options.style}")
        if options.fallback_style:
            command.append(f"--fallback-style={options.fallback_style}")
        if options.assume_filename:
            command.append(f"--assume-filename={options.assume_filename}")
        command.extend(request.restriction.to_arguments())
        if request.cursor is not None:
            command.append(f"--cursor={request.cursor}")
        return command

    def format(self, request: FormatRequest) -> EditBatch:
        """Invoke clang-format on ``request.content``.

        Raises
        ------
        ProcessFailure
            clang-format exited non-zero or was killed.
        MalformedOutput
            The replacement XML could not be interpreted.
        """
        command = self.build_command(request)
        result = self._runner(command, input_bytes=request.content).check()
        if result.stderr.strip():
            logger.info("[Format] clang-format: %s", result.stderr_text.strip())

        batch = parse_replacements(result.stdout)
        logger.debug(
            "[Format] clang-format returned %d replacement(s), cursor=%s, "
            "incomplete=%s", len(batch), batch.cursor, batch.incomplete,
        )
        return batch
