"""End-to-end tests for codedoc.pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest

from codedoc import generate_summaries
from codedoc.cancellation import CancellationToken
from codedoc.config import CacheConfig, CodedocConfig, LLMConfig
from codedoc.errors import ConfigurationError, CredentialsError
from codedoc.llm.base import Generator
from codedoc.models import GenerationResult, SummarizeRequest


class EchoGenerator(Generator):
    def __init__(self) -> None:
        self.calls = 0

    def summarize(self, request: SummarizeRequest) -> GenerationResult:
        self.calls += 1
        return GenerationResult(text=f"- {request.kind.value} text", tokens=2)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch) -> None:
    for key in (
        "ANTHROPIC_API_KEY",
        "CODEDOC_LLM_API_KEY",
        "CODEDOC_LLM_MODEL",
        "CODEDOC_LLM_BASE_URL",
        "CODEDOC_LLM_PROVIDER",
    ):
        monkeypatch.delenv(key, raising=False)


def _write_repo(repo_builder) -> Path:
    repo_builder.write(
        {
            "main.go": "package main\n\nfunc main() {}\n",
            "go.mod": "module example.com/demo\n",
            "internal/api/handler.go": "package api\n",
            "internal/api/routes.go": "package api\n",
            "internal/api/server.go": "package api\n",
            "internal/api/server_test.go": "package api\n",
        }
    )
    return repo_builder.path()


def _config(root: Path, **overrides) -> CodedocConfig:
    config = CodedocConfig(root=root.resolve(), llm=LLMConfig(max_qps=1000.0))
    for key, value in overrides.items():
        setattr(config, key, value)
    return config


def test_warm_second_run_issues_no_generation_calls(repo_builder) -> None:
    root = _write_repo(repo_builder)
    config = _config(root)

    first_generator = EchoGenerator()
    first = generate_summaries(root, config, generator=first_generator)
    second_generator = EchoGenerator()
    second = generate_summaries(root, config, generator=second_generator)

    assert first.report.generation_calls == first_generator.calls > 0
    assert second_generator.calls == 0
    assert second.report.generation_calls == 0
    assert second.report.cache_hits == first.report.generation_calls
    assert [record.relative_path for record in second.scan.files] == [
        record.relative_path for record in first.scan.files
    ]
    assert not any(".codedoc-cache" in record.relative_path for record in second.scan.files)


def test_pipeline_wires_scan_detection_and_report(repo_builder) -> None:
    root = _write_repo(repo_builder)

    result = generate_summaries(root, _config(root), generator=EchoGenerator())

    paths = [record.relative_path for record in result.scan.files]
    assert "internal/api/server_test.go" not in paths
    assert [tool.type for tool in result.detection.build_tools] == ["go"]
    assert result.detection.entrypoints[0].command == "go run main.go"
    assert result.report.module_summaries == {"internal/api": "- module text"}
    assert result.report.file_summaries["main.go"].functions == ["function text"]
    assert result.report.quickstart_steps == ["quickstart text"]
    assert result.report.to_dict()["architecture_summary"] == "- architecture text"


def test_dry_run_from_config_file_leaves_cache_empty(repo_builder) -> None:
    root = _write_repo(repo_builder)
    (root / ".codedoc.yml").write_text("dry_run: true\n", encoding="utf-8")

    result = generate_summaries(root)

    assert result.report.architecture_summary == (
        "[architecture summary placeholder - dry run mode]"
    )
    assert result.report.quickstart_steps == ["[quickstart summary placeholder - dry run mode]"]
    assert not (root / ".codedoc-cache").exists()


def test_missing_credentials_abort_before_scanning(repo_builder) -> None:
    root = _write_repo(repo_builder)

    with pytest.raises(CredentialsError):
        generate_summaries(root, _config(root))

    assert not (root / ".codedoc-cache").exists()


def test_invalid_budget_is_rejected(repo_builder) -> None:
    root = _write_repo(repo_builder)

    with pytest.raises(ConfigurationError):
        generate_summaries(root, _config(root, max_files=0), generator=EchoGenerator())


def test_custom_cache_dir_and_excludes_are_not_scanned(repo_builder) -> None:
    root = _write_repo(repo_builder)
    repo_builder.write({"generated/stub.go": "package generated\n"})
    config = _config(
        root, cache=CacheConfig(dir="out/summaries"), exclude_paths=["generated"]
    )

    generate_summaries(root, config, generator=EchoGenerator())
    result = generate_summaries(root, config, generator=EchoGenerator())

    assert (root / "out" / "summaries").is_dir()
    paths = [record.relative_path for record in result.scan.files]
    assert not any(path.startswith(("out/summaries", "generated/")) for path in paths)
    assert result.report.generation_calls == 0


def test_cancelled_run_is_reported(repo_builder) -> None:
    root = _write_repo(repo_builder)
    token = CancellationToken()
    token.cancel()

    result = generate_summaries(root, _config(root), generator=EchoGenerator(), cancel=token)

    assert result.scan.cancelled is True
    assert result.report.cancelled is True
    assert result.report.generation_calls == 0


def test_missing_root_is_a_configuration_error(tmp_path: Path) -> None:
    (tmp_path / ".codedoc.yml").write_text("llm:\n  provider: anthropic\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="not a directory"):
        generate_summaries(tmp_path / "missing")


def test_file_root_is_a_configuration_error(repo_builder) -> None:
    root = _write_repo(repo_builder)

    with pytest.raises(ConfigurationError, match="not a directory"):
        generate_summaries(root / "main.go", generator=EchoGenerator())


def test_log_file_records_the_run(repo_builder, restore_codedoc_logger, tmp_path: Path) -> None:
    root = _write_repo(repo_builder)
    log_file = tmp_path / "run.log"

    generate_summaries(
        root, _config(root), generator=EchoGenerator(), verbose=True, log_file=log_file
    )
    for handler in restore_codedoc_logger.handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "codedoc.pipeline: Using EchoGenerator" in text
    assert "codedoc.orchestrator: Summaries complete" in text
