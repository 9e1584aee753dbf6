"""Tests for ModuleGenerator (zfscaffold.codegen.generator).

Covers:
- create module: directory tree, Module.php, module.config.php, registration
- create controller: class file, index view, invokables registration
- create action: merged method and view script
- create routing: per-controller and single-route layouts
- Conflict and prerequisite errors
"""

from __future__ import annotations

from pathlib import Path

import pytest

from zfscaffold.codegen.config_document import load_config
from zfscaffold.codegen.generator import ModuleGenerator
from zfscaffold.codegen.models import PhpExpression
from zfscaffold.codegen.parser import parse_class_file
from zfscaffold.errors import GenerationConflictError, ValidationError
from zfscaffold.naming.resolver import ScaffoldRequest, resolve

pytestmark = pytest.mark.unit


@pytest.fixture
def generator(blog_names, policy) -> ModuleGenerator:
    return ModuleGenerator(blog_names, policy)


@pytest.fixture
def blog_module(generator) -> ModuleGenerator:
    generator.create_module()
    return generator


@pytest.fixture
def index_controller(blog_module) -> ModuleGenerator:
    blog_module.create_controller()
    return blog_module


class TestCreateModule:
    def test_tree(self, generator, zf2_project):
        result = generator.create_module()
        module = zf2_project / "module" / "Blog"
        assert (module / "Module.php").is_file()
        assert (module / "config" / "module.config.php").is_file()
        assert (module / "src" / "Blog" / "Controller").is_dir()
        assert (module / "view" / "blog").is_dir()
        assert result.written == [module / "Module.php", module / "config" / "module.config.php"]

    def test_module_class(self, blog_module, zf2_project):
        text = (zf2_project / "module" / "Blog" / "Module.php").read_text(encoding="utf-8")
        model = parse_class_file(text, expected_class="Module")
        assert model.namespace == "Blog"
        assert [m.name for m in model.class_model.methods] == ["getConfig", "getAutoloaderConfig"]
        assert "return include __DIR__ . '/config/module.config.php';" in text
        assert "'Zend\\Loader\\StandardAutoloader' => array(" in text
        assert "__NAMESPACE__ => __DIR__ . '/src/' . __NAMESPACE__," in text

    def test_module_config(self, blog_module, zf2_project):
        document = load_config(zf2_project / "module" / "Blog" / "config" / "module.config.php")
        assert document["view_manager"] == {
            "template_path_stack": {"blog": PhpExpression("__DIR__ . '/../view'")}
        }
        assert document["controllers"] == {"invokables": []}

    def test_register_module(self, blog_module, zf2_project):
        app_config = zf2_project / "config" / "application.config.php"
        update = blog_module.register_module()
        assert update.changed is True
        assert update.backup_path == zf2_project / "config" / "application.config.old"
        assert load_config(app_config)["modules"] == ["Application", "Blog"]

        assert blog_module.register_module().changed is False

    def test_existing_module(self, blog_module):
        with pytest.raises(GenerationConflictError, match="already exists"):
            blog_module.create_module()

    def test_no_doc_blocks(self, blog_names, bare_policy, zf2_project):
        ModuleGenerator(blog_names, bare_policy).create_module()
        text = (zf2_project / "module" / "Blog" / "Module.php").read_text(encoding="utf-8")
        assert "/*" not in text


class TestCreateController:
    def test_files(self, blog_module, zf2_project):
        result = blog_module.create_controller()
        module = zf2_project / "module" / "Blog"
        controller = module / "src" / "Blog" / "Controller" / "IndexController.php"
        index_view = module / "view" / "blog" / "index" / "index.phtml"
        assert result.written == [controller, index_view]

        model = parse_class_file(controller.read_text(encoding="utf-8"), "IndexController")
        assert model.namespace == "Blog\\Controller"
        assert model.imports == [
            "Zend\\Mvc\\Controller\\AbstractActionController",
            "Zend\\View\\Model\\ViewModel",
        ]
        assert model.class_model.parent == "AbstractActionController"
        assert [m.name for m in model.class_model.methods] == ["indexAction"]
        assert 'Action "index"' in index_view.read_text(encoding="utf-8")

    def test_registration(self, blog_module, zf2_project):
        result = blog_module.create_controller()
        assert [u.changed for u in result.config_updates] == [True]
        document = load_config(zf2_project / "module" / "Blog" / "config" / "module.config.php")
        assert document["controllers"]["invokables"] == {
            "Blog\\Controller\\Index": "Blog\\Controller\\IndexController"
        }

    def test_no_config(self, blog_module, zf2_project):
        module_config = zf2_project / "module" / "Blog" / "config" / "module.config.php"
        before = module_config.read_text(encoding="utf-8")
        result = blog_module.create_controller(register=False)
        assert result.config_updates == []
        assert module_config.read_text(encoding="utf-8") == before

    def test_existing_controller(self, index_controller):
        with pytest.raises(GenerationConflictError, match="IndexController"):
            index_controller.create_controller()

    def test_missing_module(self, generator):
        with pytest.raises(ValidationError):
            generator.create_controller()


class TestCreateAction:
    def test_create_action_show(self, index_controller, zf2_project):
        controller = zf2_project / "module" / "Blog" / "src" / "Blog" / "Controller" / "IndexController.php"
        before = controller.read_text(encoding="utf-8")

        result = index_controller.create_action()

        view = zf2_project / "module" / "Blog" / "view" / "blog" / "index" / "show.phtml"
        assert result.written == [controller, view]
        after = controller.read_text(encoding="utf-8")
        assert after.startswith(before[: before.rindex("}")])
        assert [m.name for m in parse_class_file(after).class_model.methods] == [
            "indexAction",
            "showAction",
        ]
        assert 'Action "Show"' in view.read_text(encoding="utf-8")

    def test_second_run_conflicts_and_leaves_file_untouched(self, index_controller, blog_names):
        index_controller.create_action()
        controller = blog_names.controller_file_path
        before = controller.read_text(encoding="utf-8")
        with pytest.raises(GenerationConflictError, match="showAction"):
            index_controller.create_action()
        assert controller.read_text(encoding="utf-8") == before

    def test_existing_view_script_is_kept(self, index_controller, blog_names):
        blog_names.action_view_path.write_text("custom", encoding="utf-8")
        result = index_controller.create_action()
        assert result.skipped == [blog_names.action_view_path]
        assert blog_names.action_view_path.read_text(encoding="utf-8") == "custom"

    def test_crlf_controller_keeps_crlf(self, index_controller, blog_names):
        controller = blog_names.controller_file_path
        lf_text = controller.read_text(encoding="utf-8")
        controller.write_bytes(lf_text.replace("\n", "\r\n").encode("utf-8"))

        index_controller.create_action()

        after = controller.read_bytes().decode("utf-8")
        assert after.startswith(lf_text[: lf_text.rindex("}")].replace("\n", "\r\n"))
        assert "\n" not in after.replace("\r\n", "")

    def test_missing_controller(self, blog_module):
        with pytest.raises(ValidationError, match="does not exist"):
            blog_module.create_action()


class TestCreateRouting:
    def test_route_per_controller(self, index_controller, zf2_project):
        index_controller.create_routing()
        routes = load_config(zf2_project / "module" / "Blog" / "config" / "module.config.php")[
            "router"
        ]["routes"]
        assert list(routes) == ["blog-index"]
        assert routes["blog-index"]["options"]["route"] == "/blog/index[/:action]"
        assert routes["blog-index"]["options"]["defaults"] == {
            "controller": "Blog\\Controller\\Index",
            "action": "index",
        }

    def test_single_route(self, index_controller, zf2_project):
        index_controller.create_routing(single_route=True)
        routes = load_config(zf2_project / "module" / "Blog" / "config" / "module.config.php")[
            "router"
        ]["routes"]
        assert routes["blog"]["options"]["route"] == "/blog[/:controller[/:action]]"
        assert routes["blog"]["options"]["defaults"]["__NAMESPACE__"] == "Blog\\Controller"

    def test_rerun_is_a_no_op(self, index_controller):
        index_controller.create_routing()
        result = index_controller.create_routing()
        assert [u.changed for u in result.config_updates] == [False]

    def test_every_controller_gets_a_route(self, index_controller, zf2_project, policy):
        names = resolve(
            ScaffoldRequest(path=str(zf2_project), module_name="Blog", controller_name="post-admin")
        )
        ModuleGenerator(names, policy).create_controller()
        index_controller.create_routing()
        routes = load_config(names.module_config_path)["router"]["routes"]
        assert list(routes) == ["blog-index", "blog-post-admin"]

    def test_module_without_controllers(self, blog_module):
        with pytest.raises(ValidationError, match="no controllers"):
            blog_module.create_routing()
