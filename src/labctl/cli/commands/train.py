"""SentencePiece training command.

Available both as ``labctl train-sentencepiece`` and as the standalone
``train-sentencepiece`` script.
"""

from __future__ import annotations

__all__ = ["main", "train_sentencepiece"]

import sys

import click

from labctl.cli.actions import exit_with_error
from labctl.cli.styling import style_error, style_success
from labctl.constants import BOS_TOKEN, DEFAULT_MAX_SENTENCES, EOS_TOKEN, SPM_TRAIN_BINARY
from labctl.exceptions import InvalidArgumentError, LabctlError
from labctl.tokenizer import parse_trainer_args, train, user_defined_symbols
from labctl.utils.cli import get_runner
from labctl.utils.file_helpers import get_controller_log_path
from labctl.utils.logging import configure_logging

_EXAMPLE = "passwords.lst pass_unigram 32000 500000"


class TrainerCommand(click.Command):
    """Command whose help lists the arguments and reserved symbols.

    Usage errors (an extra argument, for instance) exit 1 like every other
    validation failure of the trainer.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise

    def format_help_text(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Replace the docstring body with the argument reference."""
        formatter.write(_usage_details(ctx))


def _usage_details(ctx: click.Context) -> str:
    return f"""       E.g., {ctx.command_path} {_EXAMPLE}

    input_file      Path to your text data
    model_name      Prefix for the generated *.model and *.vocab files
    vocab_size      Size of the vocabulary to build
    max_sentences   (optional) Maximum lines to consider from input. Default: {DEFAULT_MAX_SENTENCES}

    The following user-defined symbols are reserved:
      - {BOS_TOKEN}
      - {EOS_TOKEN}

    Make sure '{SPM_TRAIN_BINARY}' (SentencePiece) is installed and in your PATH.
"""


@click.command(
    "train-sentencepiece",
    cls=TrainerCommand,
    context_settings={"help_option_names": ["-h", "--help"], "ignore_unknown_options": True},
)
@click.argument("input_file", required=False)
@click.argument("model_name", required=False)
@click.argument("vocab_size", required=False)
@click.argument("max_sentences", required=False)
@click.pass_context
def train_sentencepiece(
    ctx: click.Context,
    input_file: str | None,
    model_name: str | None,
    vocab_size: str | None,
    max_sentences: str | None,
) -> None:
    """Train a unigram SentencePiece tokenizer."""
    runner = get_runner(ctx)

    try:
        args = parse_trainer_args(input_file, model_name, vocab_size, max_sentences, runner=runner)
    except InvalidArgumentError as e:
        if e.argument == "arguments":
            click.echo(ctx.get_usage(), err=True)
            click.echo(_usage_details(ctx), err=True)
        exit_with_error(e)
    except LabctlError as e:
        exit_with_error(e)

    click.echo(f"{click.style('Training file:', fg='cyan')}          {args.input_file}")
    click.echo(f"{click.style('Output model prefix:', fg='cyan')}    {args.model_prefix}")
    click.echo(f"{click.style('Vocabulary size:', fg='cyan')}        {args.vocab_size}")
    click.echo(f"{click.style('Max sentences:', fg='cyan')}          {args.max_sentences}")
    click.echo(f"{click.style('User-defined symbols:', fg='cyan')}   {user_defined_symbols()}")
    click.echo()
    click.echo(click.style("Starting SentencePiece training now...", bold=True))
    click.echo()

    if train(args, runner=runner) != 0:
        click.echo(style_error("SentencePiece training failed. Check logs above."), err=True)
        sys.exit(1)

    click.echo()
    click.echo(style_success("Training completed successfully! Your model files:"))
    for name in args.output_files:
        click.echo(f"  - {name}")


def main() -> None:
    """Standalone entry point for the train-sentencepiece script."""
    configure_logging(get_controller_log_path())
    train_sentencepiece()
