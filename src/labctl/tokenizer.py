"""SentencePiece training wrapper.

Validates arguments and runs `spm_train` with a fixed unigram
configuration and two user-defined symbols (<BOS>, <EOS>).

Example:
    args = parse_trainer_args("passwords.lst", "pass_unigram", "32000", "500000", runner=runner)
    returncode = train(args, runner=runner)
"""

from __future__ import annotations

__all__ = [
    "TrainerArgs",
    "build_spm_command",
    "parse_trainer_args",
    "train",
    "user_defined_symbols",
]

import logging
from dataclasses import dataclass
from pathlib import Path

from labctl.constants import (
    BOS_TOKEN,
    DEFAULT_MAX_SENTENCES,
    EOS_TOKEN,
    SPM_MODEL_TYPE,
    SPM_TRAIN_BINARY,
)
from labctl.exceptions import InputFileNotFoundError, InvalidArgumentError, ToolNotFoundError
from labctl.models import ControllerEvent
from labctl.runner import CommandRunner
from labctl.utils.logging import log_event
from labctl.utils.validation import is_non_negative_integer


def user_defined_symbols() -> str:
    """Comma-separated symbols reserved in every trained vocabulary."""
    return f"{BOS_TOKEN},{EOS_TOKEN}"


@dataclass(frozen=True, slots=True)
class TrainerArgs:
    """Validated trainer arguments.

    Attributes:
        input_file: Training text, one sentence per line.
        model_prefix: Prefix of the generated .model / .vocab files.
        vocab_size: Target vocabulary size.
        max_sentences: Maximum lines sampled from the input.
    """

    input_file: Path
    model_prefix: str
    vocab_size: int
    max_sentences: int = DEFAULT_MAX_SENTENCES

    @property
    def output_files(self) -> tuple[str, str]:
        return (f"{self.model_prefix}.model", f"{self.model_prefix}.vocab")


def parse_trainer_args(
    input_file: str | None,
    model_name: str | None,
    vocab_size: str | None,
    max_sentences: str | None = None,
    *,
    runner: CommandRunner,
) -> TrainerArgs:
    """Validate raw command-line values.

    Checks run in a fixed order and stop at the first failure; nothing is
    executed before all of them pass.

    Args:
        input_file: Path to the training text.
        model_name: Output model prefix.
        vocab_size: Vocabulary size (digits only).
        max_sentences: Optional sentence cap (digits only).
        runner: Used to locate spm_train.

    Returns:
        TrainerArgs ready for train().

    Raises:
        InvalidArgumentError: Missing or non-numeric argument.
        ToolNotFoundError: spm_train is not on PATH.
        InputFileNotFoundError: input_file does not exist.
    """
    if not input_file or not model_name or not vocab_size:
        raise InvalidArgumentError("arguments", "Missing required arguments.")

    if runner.which(SPM_TRAIN_BINARY) is None:
        raise ToolNotFoundError(SPM_TRAIN_BINARY, "Please install SentencePiece.")

    input_path = Path(input_file)
    if not input_path.is_file():
        raise InputFileNotFoundError(input_path)

    if not is_non_negative_integer(vocab_size):
        raise InvalidArgumentError(
            "vocab_size",
            f"vocab_size must be a positive integer. Got: {vocab_size}",
            value=vocab_size,
        )

    if not max_sentences:
        sentences = DEFAULT_MAX_SENTENCES
    elif is_non_negative_integer(max_sentences):
        sentences = int(max_sentences)
    else:
        raise InvalidArgumentError(
            "max_sentences",
            f"max_sentences must be a positive integer. Got: {max_sentences}",
            value=max_sentences,
        )

    return TrainerArgs(
        input_file=input_path,
        model_prefix=model_name,
        vocab_size=int(vocab_size),
        max_sentences=sentences,
    )


def build_spm_command(args: TrainerArgs) -> list[str]:
    """Build the spm_train argv for validated arguments."""
    return [
        SPM_TRAIN_BINARY,
        f"--input={args.input_file}",
        f"--model_prefix={args.model_prefix}",
        f"--vocab_size={args.vocab_size}",
        f"--model_type={SPM_MODEL_TYPE}",
        "--character_coverage=1.0",
        "--shuffle_input_sentence=true",
        f"--input_sentence_size={args.max_sentences}",
        f"--user_defined_symbols={user_defined_symbols()}",
        "--hard_vocab_limit=false",
    ]


def train(args: TrainerArgs, *, runner: CommandRunner) -> int:
    """Run spm_train with output attached to the terminal.

    Returns:
        The tool's exit status.
    """
    argv = build_spm_command(args)
    returncode = runner.call(argv)
    log_event(
        logging.INFO,
        ControllerEvent(
            event="tokenizer_training_finished",
            message=f"spm_train exited with status {returncode}",
            path=str(args.input_file),
            details={"argv": argv, "returncode": returncode},
        ),
    )
    return returncode
