"""Heuristic detection of entrypoints, frameworks and build tooling."""

from __future__ import annotations

import json
import posixpath
import re
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .logging import get_logger
from .models import (
    BuildTool,
    DataModel,
    DetectionResult,
    Endpoint,
    Entrypoint,
    FileRecord,
    Framework,
    ScanSet,
)

EndpointExtractor = Callable[[FileRecord, str], Iterable[Endpoint]]
ModelExtractor = Callable[[FileRecord, str], Iterable[DataModel]]

logger = get_logger("detector")

_PYTHON_ENTRYPOINTS = {"__main__.py", "main.py", "app.py"}
_NODE_ENTRYPOINTS = {"index.js", "index.ts", "server.js", "app.js"}

# Substring indicators per language; the first matching indicator wins.
_FRAMEWORK_INDICATORS: Dict[str, Tuple[Tuple[str, Tuple[str, ...]], ...]] = {
    "go": (
        ("gin", ("github.com/gin-gonic/gin", "gin.New()", "gin.Default()")),
        ("echo", ("github.com/labstack/echo", "echo.New()")),
        ("fiber", ("github.com/gofiber/fiber", "fiber.New()")),
        ("chi", ("github.com/go-chi/chi", "chi.NewRouter()")),
        ("gorilla/mux", ("github.com/gorilla/mux", "mux.NewRouter()")),
        ("beego", ("github.com/astaxie/beego", "beego.Run()")),
    ),
    "python": (
        ("flask", ("from flask import", "Flask(__name__)")),
        ("django", ("from django", "django.contrib")),
        ("fastapi", ("from fastapi import", "FastAPI()")),
        ("tornado", ("import tornado", "tornado.web")),
        ("pyramid", ("from pyramid", "pyramid.config")),
    ),
    "javascript": (
        ("express", ("require('express')", 'require("express")', "from 'express'")),
        ("koa", ("require('koa')", "from 'koa'")),
        ("hapi", ("require('@hapi/hapi')", "from '@hapi/hapi'")),
        ("fastify", ("require('fastify')", "from 'fastify'")),
    ),
    "typescript": (
        ("express", ("from 'express'", "import express")),
        ("nest", ("@nestjs/", "from '@nestjs")),
        ("next", ("from 'next'", "import next")),
    ),
}

_MAKE_TARGET = re.compile(r"^([A-Za-z0-9_][A-Za-z0-9_./-]*)\s*:(?!=)")


class Detector:
    """Derives descriptive repository facts from a scan set.

    Endpoint and data model extraction is delegated to the callables passed in;
    without any, those lists stay empty.
    """

    def __init__(
        self,
        *,
        endpoint_extractors: Sequence[EndpointExtractor] = (),
        model_extractors: Sequence[ModelExtractor] = (),
    ) -> None:
        self.endpoint_extractors = tuple(endpoint_extractors)
        self.model_extractors = tuple(model_extractors)

    def detect(self, scan_set: ScanSet) -> DetectionResult:
        result = DetectionResult()
        frameworks: Dict[Tuple[str, str], Framework] = {}

        for record in scan_set.files:
            text = _safe_read(Path(record.path))
            result.entrypoints.extend(self._entrypoints(record, text))
            for framework in self._frameworks(record, text):
                key = (framework.language, framework.name)
                if key in frameworks:
                    frameworks[key].files.extend(framework.files)
                else:
                    frameworks[key] = framework
            build_tool = self._build_tool(record, text)
            if build_tool is not None:
                result.build_tools.append(build_tool)
            if text is None:
                continue
            for extract_endpoints in self.endpoint_extractors:
                result.endpoints.extend(extract_endpoints(record, text))
            for extract_models in self.model_extractors:
                result.models.extend(extract_models(record, text))

        result.frameworks = list(frameworks.values())
        logger.debug(
            "Detected %d entrypoints, %d frameworks, %d build tools",
            len(result.entrypoints),
            len(result.frameworks),
            len(result.build_tools),
        )
        return result

    # ------------------------------------------------------------------
    # Entrypoints

    def _entrypoints(self, record: FileRecord, text: Optional[str]) -> List[Entrypoint]:
        rel_path = record.relative_path
        base = posixpath.basename(rel_path)
        directories = posixpath.dirname(rel_path).split("/")

        if record.language == "go":
            if (base == "main.go" or "cmd" in directories) and text and "func main()" in text:
                return [
                    Entrypoint(
                        type="go-binary",
                        path=rel_path,
                        command=f"go run {rel_path}",
                        description="Go main package",
                    )
                ]
        elif record.language == "python":
            if base in _PYTHON_ENTRYPOINTS:
                return [
                    Entrypoint(
                        type="python-script",
                        path=rel_path,
                        command=f"python {rel_path}",
                        description="Python entrypoint",
                    )
                ]
        elif record.language in {"javascript", "typescript"}:
            if base in _NODE_ENTRYPOINTS:
                return [
                    Entrypoint(
                        type="node-script",
                        path=rel_path,
                        command=f"node {rel_path}",
                        description="Node.js entrypoint",
                    )
                ]
        elif record.language == "dockerfile":
            return [
                Entrypoint(
                    type="docker",
                    path=rel_path,
                    command="docker build .",
                    description="Docker container",
                )
            ]
        return []

    # ------------------------------------------------------------------
    # Frameworks

    def _frameworks(self, record: FileRecord, text: Optional[str]) -> List[Framework]:
        indicators = _FRAMEWORK_INDICATORS.get(record.language)
        if not indicators or not text:
            return []
        found = []
        for name, patterns in indicators:
            if any(pattern in text for pattern in patterns):
                found.append(
                    Framework(name=name, language=record.language, files=[record.relative_path])
                )
        return found

    # ------------------------------------------------------------------
    # Build tooling

    def _build_tool(self, record: FileRecord, text: Optional[str]) -> Optional[BuildTool]:
        base = posixpath.basename(record.relative_path).lower()
        rel_path = record.relative_path

        if base in {"makefile", "gnumakefile"}:
            return BuildTool(type="make", file=rel_path, scripts=extract_make_targets(text or ""))
        if base == "package.json":
            return BuildTool(type="npm", file=rel_path, scripts=extract_package_scripts(text or ""))
        if base == "go.mod":
            return BuildTool(type="go", file=rel_path, scripts=["go build", "go test", "go run"])
        if base == "cargo.toml":
            return BuildTool(
                type="cargo", file=rel_path, scripts=["cargo build", "cargo test", "cargo run"]
            )
        if base in {"requirements.txt", "setup.py", "pipfile"}:
            return BuildTool(type="pip", file=rel_path, scripts=["pip install -r requirements.txt"])
        if base == "pyproject.toml":
            return BuildTool(type="pip", file=rel_path, scripts=["pip install -e ."])
        if base in {"docker-compose.yml", "docker-compose.yaml"}:
            return BuildTool(
                type="docker-compose",
                file=rel_path,
                scripts=["docker-compose up", "docker-compose build"],
            )
        return None


def extract_make_targets(content: str) -> List[str]:
    """Return explicit Makefile targets in declaration order, skipping special targets."""
    targets: List[str] = []
    for line in content.splitlines():
        if line.startswith(("\t", "#")):
            continue
        match = _MAKE_TARGET.match(line)
        if not match:
            continue
        target = match.group(1)
        if target.startswith(".") or target in targets:
            continue
        targets.append(target)
    return targets


def extract_package_scripts(content: str) -> List[str]:
    """Return the script names declared in a package.json document."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        logger.debug("package.json is not valid JSON; ignoring scripts")
        return []
    if not isinstance(data, dict):
        return []
    scripts = data.get("scripts")
    if not isinstance(scripts, dict):
        return []
    return [name for name in scripts if isinstance(name, str)]


def _safe_read(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="ignore")
    except OSError as exc:
        logger.debug("Unable to read %s during detection: %s", path, exc)
        return None


__all__ = [
    "Detector",
    "EndpointExtractor",
    "ModelExtractor",
    "extract_make_targets",
    "extract_package_scripts",
]
