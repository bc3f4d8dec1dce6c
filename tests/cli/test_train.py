"""Unit tests for the train-sentencepiece command.

The command runner is passed as the context object so spm_train is
never executed.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from labctl.cli import cli
from labctl.cli.commands.train import train_sentencepiece
from tests.conftest import FakeRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def corpus(tmp_path: Path) -> Path:
    path = tmp_path / "passwords.lst"
    path.write_text("hunter2\n")
    return path


class TestUsage:
    """Tests for help and missing arguments."""

    @pytest.mark.parametrize("flag", ["-h", "--help"])
    def test_help_exits_0(self, runner: CliRunner, flag: str) -> None:
        """Given -h or --help, prints usage with the reserved symbols."""
        # Act
        result = runner.invoke(train_sentencepiece, [flag])

        # Assert
        assert result.exit_code == 0
        assert "vocab_size" in result.output
        assert "<BOS>" in result.output
        assert "50000000" in result.output

    def test_missing_arguments_exit_1(self, runner: CliRunner, fake_runner: FakeRunner) -> None:
        """Given only an input file, prints usage and exits 1."""
        # Act
        result = runner.invoke(train_sentencepiece, ["data.txt"], obj=fake_runner)

        # Assert
        assert result.exit_code == 1
        assert "Missing required arguments." in result.output
        assert "Usage:" in result.output
        assert fake_runner.calls == []


class TestValidation:
    """Tests for argument validation before training."""

    def test_non_numeric_vocab_size_does_not_run(
        self, runner: CliRunner, fake_runner: FakeRunner, corpus: Path
    ) -> None:
        """Given vocab_size=abc, exits 1 without invoking spm_train."""
        # Act
        result = runner.invoke(train_sentencepiece, [str(corpus), "m", "abc"], obj=fake_runner)

        # Assert
        assert result.exit_code == 1
        assert "vocab_size must be a positive integer. Got: abc" in result.output
        assert fake_runner.calls == []

    def test_negative_vocab_size_is_rejected_as_value(
        self, runner: CliRunner, fake_runner: FakeRunner, corpus: Path
    ) -> None:
        """Given vocab_size=-5, reports it as non-numeric and exits 1."""
        # Act
        result = runner.invoke(train_sentencepiece, [str(corpus), "m", "-5"], obj=fake_runner)

        # Assert
        assert result.exit_code == 1
        assert "vocab_size must be a positive integer. Got: -5" in result.output
        assert fake_runner.calls == []

    def test_extra_argument_exits_1(self, runner: CliRunner, fake_runner: FakeRunner, corpus: Path) -> None:
        """Given a fifth positional argument, exits 1 without invoking spm_train."""
        # Act
        result = runner.invoke(
            train_sentencepiece,
            [str(corpus), "m", "100", "5", "extra"],
            obj=fake_runner,
        )

        # Assert
        assert result.exit_code == 1
        assert "extra" in result.output
        assert fake_runner.calls == []

    def test_extra_argument_exits_1_as_labctl_subcommand(
        self, runner: CliRunner, fake_runner: FakeRunner, corpus: Path
    ) -> None:
        """Given 'labctl train-sentencepiece' with a fifth positional argument, exits 1."""
        # Act
        result = runner.invoke(
            cli,
            ["train-sentencepiece", str(corpus), "m", "100", "5", "extra"],
            obj=fake_runner,
        )

        # Assert
        assert result.exit_code == 1
        assert fake_runner.calls == []

    def test_missing_spm_train(self, runner: CliRunner, corpus: Path) -> None:
        """Given spm_train is not installed, exits 1."""
        # Arrange
        fake_runner = FakeRunner(tools=frozenset())

        # Act
        result = runner.invoke(train_sentencepiece, [str(corpus), "m", "8000"], obj=fake_runner)

        # Assert
        assert result.exit_code == 1
        assert "spm_train" in result.output

    def test_missing_input_file(self, runner: CliRunner, fake_runner: FakeRunner, tmp_path: Path) -> None:
        """Given a nonexistent input file, exits 1."""
        # Act
        result = runner.invoke(train_sentencepiece, [str(tmp_path / "nope"), "m", "8000"], obj=fake_runner)

        # Assert
        assert result.exit_code == 1
        assert "does not exist" in result.output


class TestTraining:
    """Tests for the training run."""

    def test_success_lists_model_files(self, runner: CliRunner, fake_runner: FakeRunner, corpus: Path) -> None:
        """Given spm_train exits 0, exits 0 and lists the outputs."""
        # Act
        result = runner.invoke(
            train_sentencepiece,
            [str(corpus), "pass_unigram", "32000", "500000"],
            obj=fake_runner,
        )

        # Assert
        assert result.exit_code == 0, result.output
        assert "pass_unigram.model" in result.output
        assert "pass_unigram.vocab" in result.output
        assert "--input_sentence_size=500000" in fake_runner.calls[0]

    def test_tool_failure_exits_1(self, runner: CliRunner, corpus: Path) -> None:
        """Given spm_train exits non-zero, exits 1."""
        # Arrange
        fake_runner = FakeRunner(call_returncode=2)

        # Act
        result = runner.invoke(train_sentencepiece, [str(corpus), "m", "8000"], obj=fake_runner)

        # Assert
        assert result.exit_code == 1
        assert "training failed" in result.output

    def test_available_as_labctl_subcommand(self, runner: CliRunner, fake_runner: FakeRunner, corpus: Path) -> None:
        """Given 'labctl train-sentencepiece', runs the same command."""
        # Act
        result = runner.invoke(cli, ["train-sentencepiece", str(corpus), "m", "8000"], obj=fake_runner)

        # Assert
        assert result.exit_code == 0, result.output
        assert len(fake_runner.calls) == 1
