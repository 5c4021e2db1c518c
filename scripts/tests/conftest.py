"""Shared test fixtures for the manipulation test suite."""

import json
import textwrap
from pathlib import Path

import pytest

from manip.models import Dependency, MavenModule

PLUGIN_REGISTRY = {
    "name": "amg-plugin-registry",
    "version": "1.0.0",
    "repository": {
        "type": "maven",
        "url": "https://repository.jboss.org/nexus/content/groups/public/",
    },
    "plugins": [
        {
            "name": "cors",
            "version": "1.3.0",
            "description": "CORS, controlling access to resources outside of an originating domain.",
        },
        {
            "name": "rate-limiting",
            "version": "2.1.0",
            "description": "Limits the number of requests per client.",
        },
    ],
}

NPM_SHRINKWRAP = {
    "name": "demo",
    "version": "0.0.1",
    "dependencies": {
        "keycloak-connect": {
            "version": "2.2.0",
            "from": "keycloak-connect@2.2.0",
            "dependencies": {"jwk-to-pem": {"version": "1.2.6"}},
        },
    },
}


@pytest.fixture
def plugin_registry():
    """A fresh copy of the plugin registry document."""
    return json.loads(json.dumps(PLUGIN_REGISTRY))


@pytest.fixture
def npm_shrinkwrap():
    return json.loads(json.dumps(NPM_SHRINKWRAP))


@pytest.fixture
def json_file(tmp_path):
    """Factory fixture that writes a JSON document to the temp directory."""
    def _write(name: str, document) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def tmp_pom(tmp_path):
    """Factory fixture that writes a pom.xml to a temp directory and returns the path."""
    def _write(content: str, directory: str = "") -> Path:
        target_dir = tmp_path / directory if directory else tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        pom = target_dir / "pom.xml"
        pom.write_text(textwrap.dedent(content), encoding="utf-8")
        return pom
    return _write


@pytest.fixture
def logging_module():
    """A module declaring jboss-logging through a property and junit literally."""
    return MavenModule(
        group_id="com.example",
        artifact_id="demo",
        version="1.0.0",
        properties={"jboss-logging.version": "3.3.0.Final", "junit.version": "4.12"},
        dependencies=[
            Dependency(
                group_id="org.jboss.logging",
                artifact_id="jboss-logging",
                version="${jboss-logging.version}",
                location="dependencies/dependency[0]",
            ),
            Dependency(
                group_id="commons-io",
                artifact_id="commons-io",
                version="2.4",
                location="dependencies/dependency[1]",
            ),
            Dependency(
                group_id="junit",
                artifact_id="junit",
                version="${junit.version}",
                scope="test",
                location="dependencies/dependency[2]",
            ),
        ],
        source_dir=".",
    )
