"""
Pytest configuration for unit tests.

Provides a throwaway Clojure project layout and a matching IndexConfig.
"""
import pytest
from pathlib import Path

from codeindex.config import load_config


@pytest.fixture
def project(tmp_path):
    """Create a small Clojure project tree."""
    root = tmp_path / "project"
    (root / "src" / "app").mkdir(parents=True)
    (root / "test" / "app").mkdir(parents=True)
    (root / "resources").mkdir()

    (root / "project.clj").write_text('(defproject app "0.1.0")\n')
    (root / "src" / "app" / "core.clj").write_text('(ns app.core)\n(defn hello [] "hi")\n')
    (root / "src" / "app" / "ui.cljs").write_text('(ns app.ui)\n(def state (atom {}))\n')
    (root / "test" / "app" / "core_test.clj").write_text('(ns app.core-test)\n')
    (root / "resources" / "config.edn").write_text('{:port 8080}\n')
    (root / "README.md").write_text('# app\n')
    return root


@pytest.fixture
def config(project, monkeypatch):
    """IndexConfig for the test project with no environment override."""
    monkeypatch.delenv("LEIN_CODEINDEX_DIR", raising=False)
    return load_config(project, environ={})


