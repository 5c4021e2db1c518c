"""Tests for patcher.py - applying operations to JSON and POM trees."""

import copy
import json
import logging
import xml.etree.ElementTree as ET

import pytest

from manip.errors import PathNotFoundError
from manip.models import Operation
from manip.patcher import (
    JsonTreeResolver,
    OperationStatus,
    PomTreeResolver,
    apply,
    apply_all,
    resolver_for,
)
from manip.pom_tree import load_pom_tree

REDHAT_GA = "https://maven.repository.redhat.com/ga/"


class TestJsonPatching:
    def test_update_url(self, plugin_registry):
        original = json.dumps(plugin_registry, indent=2)
        status = apply(plugin_registry, Operation("amg-plugin-registry.json", "$.repository.url", REDHAT_GA))
        patched = json.dumps(plugin_registry, indent=2)
        assert status is OperationStatus.APPLIED
        assert REDHAT_GA in patched
        assert patched != original

    def test_not_found_leaves_document_untouched(self, npm_shrinkwrap):
        before = copy.deepcopy(npm_shrinkwrap)
        op = Operation("npm-shrinkwrap.json", "$.I.really.do.not.exist.repository.url", None)
        with pytest.raises(PathNotFoundError) as excinfo:
            apply(npm_shrinkwrap, op)
        assert excinfo.value.target == "npm-shrinkwrap.json"
        assert excinfo.value.path == "$.I.really.do.not.exist.repository.url"
        assert npm_shrinkwrap == before

    def test_not_found_outcome_logged(self, npm_shrinkwrap, caplog):
        op = Operation("npm-shrinkwrap.json", "$.missing", "x")
        with caplog.at_level(logging.DEBUG, logger="manip.patcher"):
            with pytest.raises(PathNotFoundError):
                apply(npm_shrinkwrap, op)
        assert OperationStatus.NOT_FOUND.value in caplog.text

    def test_missing_leaf_is_not_created(self, plugin_registry):
        with pytest.raises(PathNotFoundError):
            apply(plugin_registry, Operation("r.json", "$.repository.mirror", "x"))
        assert "mirror" not in plugin_registry["repository"]

    def test_recursive_path_updates_first_match_only(self, plugin_registry):
        apply(plugin_registry, Operation("r.json", "$..description", "changed"))
        assert plugin_registry["plugins"][0]["description"] == "changed"
        assert plugin_registry["plugins"][1]["description"] != "changed"

    def test_none_value_deletes(self, npm_shrinkwrap):
        apply(npm_shrinkwrap, Operation("n.json", "$.dependencies.keycloak-connect.from", None))
        assert "from" not in npm_shrinkwrap["dependencies"]["keycloak-connect"]

    def test_none_value_deletes_list_item(self, plugin_registry):
        apply(plugin_registry, Operation("r.json", "$.plugins[0]", None))
        assert [p["name"] for p in plugin_registry["plugins"]] == ["rate-limiting"]

    def test_sequential_operations_see_earlier_changes(self, plugin_registry):
        ops = [
            Operation("r.json", "$.plugins[0]", None),
            Operation("r.json", "$.plugins[0].version", "9.9.9"),
        ]
        assert apply_all(plugin_registry, ops) == 2
        assert plugin_registry["plugins"][0] == {
            "name": "rate-limiting",
            "version": "9.9.9",
            "description": "Limits the number of requests per client.",
        }

    def test_batch_not_transactional(self, plugin_registry):
        ops = [
            Operation("r.json", "$.version", "2.0.0"),
            Operation("r.json", "$.nope", "x"),
            Operation("r.json", "$.name", "never"),
        ]
        with pytest.raises(PathNotFoundError):
            apply_all(plugin_registry, ops)
        assert plugin_registry["version"] == "2.0.0"
        assert plugin_registry["name"] == "amg-plugin-registry"


class TestPomPatching:
    def test_update_property(self, tmp_pom):
        tree = load_pom_tree(tmp_pom("""\
            <?xml version="1.0" encoding="UTF-8"?>
            <project xmlns="http://maven.apache.org/POM/4.0.0">
                <artifactId>demo</artifactId>
                <properties>
                    <junit.version>4.12</junit.version>
                </properties>
            </project>
        """))
        apply(tree, Operation("pom.xml", "properties/junit.version", "4.13"))
        assert "<junit.version>4.13</junit.version>" in ET.tostring(tree.getroot(), encoding="unicode")

    def test_indexed_dependency_version(self, tmp_pom):
        tree = load_pom_tree(tmp_pom("""\
            <?xml version="1.0" encoding="UTF-8"?>
            <project>
                <dependencies>
                    <dependency><groupId>a</groupId><artifactId>a</artifactId><version>1</version></dependency>
                    <!-- second -->
                    <dependency><groupId>b</groupId><artifactId>b</artifactId><version>2</version></dependency>
                </dependencies>
            </project>
        """))
        apply(tree, Operation("pom.xml", "/project/dependencies/dependency[1]/version", "2.1"))
        versions = [el.text for el in tree.getroot().iter("version")]
        assert versions == ["1", "2.1"]

    def test_missing_element(self, tmp_pom):
        tree = load_pom_tree(tmp_pom("""\
            <?xml version="1.0" encoding="UTF-8"?>
            <project><artifactId>demo</artifactId></project>
        """))
        with pytest.raises(PathNotFoundError):
            apply(tree, Operation("pom.xml", "properties/junit.version", "4.13"))


class TestResolverSelection:
    def test_json_documents(self):
        assert isinstance(resolver_for({}), JsonTreeResolver)
        assert isinstance(resolver_for([]), JsonTreeResolver)

    def test_element_trees(self):
        assert isinstance(resolver_for(ET.Element("project")), PomTreeResolver)

    def test_unsupported(self):
        with pytest.raises(TypeError):
            resolver_for("not a tree")

    def test_explicit_resolver(self, plugin_registry):
        apply(plugin_registry, Operation("r.json", "$.name", "x"), resolver=JsonTreeResolver())
        assert plugin_registry["name"] == "x"
