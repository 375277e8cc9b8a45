"""project.pbxproj 文本模型测试"""

from __future__ import annotations

import re

import pytest

from iosresolver.core.exceptions import ProjectFileError
from iosresolver.core.pbxproj import PbxProject, file_type_for, quote, unquote

TARGET_ID = "AA0000000000000000000030"
FRAMEWORKS_PHASE = "AA0000000000000000000010"
RESOURCES_PHASE = "AA0000000000000000000011"
MAIN_GROUP = "AA0000000000000000000020"


@pytest.fixture()
def proj(pbxproj_text):
    return PbxProject(pbxproj_text)


def _list_ids(project: PbxProject, obj_id: str, name: str) -> list[str]:
    return project._id_list(project._object_body(obj_id), name)


class TestHelpers:
    def test_quote(self):
        assert quote("YES") == "YES"
        assert quote("$(PROJECT_DIR)/Frameworks") == '"$(PROJECT_DIR)/Frameworks"'
        assert quote("-ObjC") == "-ObjC"
        assert quote('say "hi"') == '"say \\"hi\\""'

    def test_unquote(self):
        assert unquote('"$(inherited)"') == "$(inherited)"
        assert unquote('"say \\"hi\\""') == 'say "hi"'
        assert unquote("bare") == "bare"

    def test_file_type(self):
        assert file_type_for("Frameworks/Foo.framework") == "wrapper.framework"
        assert file_type_for("Resources/icon.PNG") == "image.png"
        assert file_type_for("Resources/Bundle") == "folder"
        assert file_type_for("Resources/data.bin") == "file"


class TestLoad:
    def test_invalid_content(self):
        with pytest.raises(ProjectFileError, match="有效"):
            PbxProject("{ }")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProjectFileError, match="不存在"):
            PbxProject.load(tmp_path / "project.pbxproj")

    def test_round_trip_untouched(self, tmp_path, pbxproj_text):
        path = tmp_path / "project.pbxproj"
        path.write_text(pbxproj_text, encoding="utf-8")
        assert PbxProject.load(path).write_to_string() == pbxproj_text


class TestTargets:
    def test_find_target(self, proj):
        assert proj.target_guid_by_name("Unity-iPhone") == TARGET_ID

    def test_missing_target(self, proj):
        with pytest.raises(ProjectFileError, match="找不到目标"):
            proj.target_guid_by_name("Unity-iPhone Tests")


class TestBuildProperties:
    def test_get_existing(self, proj):
        assert proj.get_build_property(TARGET_ID, "OTHER_LDFLAGS") == [
            "-weak_framework", "CoreMotion",
        ]
        assert proj.get_build_property(TARGET_ID, "PRODUCT_NAME") == ["ProductName"]
        assert proj.get_build_property(TARGET_ID, "NOPE") == []

    def test_set_new_and_replace(self, proj):
        proj.set_build_property(TARGET_ID, "ENABLE_BITCODE", "YES")
        proj.set_build_property(TARGET_ID, "ENABLE_BITCODE", "NO")
        assert proj.get_build_property(TARGET_ID, "ENABLE_BITCODE") == ["NO"]
        assert proj.content.count("ENABLE_BITCODE = NO;") == 2

    def test_set_replaces_list(self, proj):
        proj.set_build_property(TARGET_ID, "OTHER_LDFLAGS", "$(inherited)")
        assert proj.get_build_property(TARGET_ID, "OTHER_LDFLAGS") == ["$(inherited)"]

    def test_add_appends_without_dedup(self, proj):
        proj.add_build_property(TARGET_ID, "OTHER_LDFLAGS", "$(inherited)")
        proj.add_build_property(TARGET_ID, "OTHER_LDFLAGS", "$(inherited)")
        assert proj.get_build_property(TARGET_ID, "OTHER_LDFLAGS") == [
            "-weak_framework", "CoreMotion", "$(inherited)", "$(inherited)",
        ]

    def test_add_to_missing_then_scalar_becomes_list(self, proj):
        proj.add_build_property(TARGET_ID, "HEADER_SEARCH_PATHS", "$(inherited)")
        assert '"HEADER_SEARCH_PATHS" = "$(inherited)";' not in proj.content
        assert 'HEADER_SEARCH_PATHS = "$(inherited)";' in proj.content
        proj.add_build_property(TARGET_ID, "HEADER_SEARCH_PATHS", "Libraries")
        assert proj.get_build_property(TARGET_ID, "HEADER_SEARCH_PATHS") == [
            "$(inherited)", "Libraries",
        ]

    def test_applies_to_every_configuration(self, proj):
        proj.add_build_property(TARGET_ID, "OTHER_CFLAGS", "-DDEBUG_POD")
        assert proj.content.count("OTHER_CFLAGS = -DDEBUG_POD;") == 2

    def test_other_settings_preserved(self, proj):
        proj.set_build_property(TARGET_ID, "CLANG_ENABLE_MODULES", "YES")
        assert '"CODE_SIGN_IDENTITY[sdk=iphoneos*]" = "iPhone Developer";' in proj.content
        reparsed = PbxProject(proj.write_to_string())
        assert reparsed.get_build_property(TARGET_ID, "CLANG_ENABLE_MODULES") == ["YES"]


class TestFiles:
    def test_add_file_registers_in_main_group(self, proj):
        guid = proj.add_file("Frameworks/Foo.framework", "Frameworks/Foo.framework")
        assert re.fullmatch(r"[0-9A-F]{24}", guid)
        assert guid in _list_ids(proj, MAIN_GROUP, "children")
        body = proj._object_body(guid)
        assert "lastKnownFileType = wrapper.framework;" in body
        assert "path = Frameworks/Foo.framework;" in body
        assert "sourceTree = SOURCE_ROOT;" in body

    def test_add_file_is_idempotent(self, proj):
        a = proj.add_file("Resources/a.png", "Resources/a.png")
        b = proj.add_file("Resources/a.png", "Resources/a.png")
        assert a == b
        assert _list_ids(proj, MAIN_GROUP, "children").count(a) == 1

    def test_framework_goes_to_frameworks_phase(self, proj):
        guid = proj.add_file("Frameworks/Foo.framework", "Frameworks/Foo.framework")
        proj.add_file_to_build(TARGET_ID, guid)
        proj.add_file_to_build(TARGET_ID, guid)
        files = _list_ids(proj, FRAMEWORKS_PHASE, "files")
        assert len(files) == 1
        assert f"fileRef = {guid}" in proj._object_body(files[0])
        assert _list_ids(proj, RESOURCES_PHASE, "files") == []

    def test_resource_goes_to_resources_phase(self, proj):
        for path in ("Resources/a.png", "Resources/Bundle"):
            proj.add_file_to_build(TARGET_ID, proj.add_file(path, path))
        assert len(_list_ids(proj, RESOURCES_PHASE, "files")) == 2
        assert _list_ids(proj, FRAMEWORKS_PHASE, "files") == []

    def test_missing_section_is_created(self, pbxproj_text):
        text = pbxproj_text.replace(
            "/* Begin PBXBuildFile section */\n", "",
        ).replace(
            "\t\tAA0000000000000000000001 /* main.mm in Sources */ = {isa = PBXBuildFile; "
            "fileRef = AA0000000000000000000002 /* main.mm */; };\n", "",
        ).replace("/* End PBXBuildFile section */\n", "")
        proj = PbxProject(text)
        proj.add_file_to_build(TARGET_ID, proj.add_file("Resources/a.png", "Resources/a.png"))
        assert "/* Begin PBXBuildFile section */" in proj.content
        assert len(_list_ids(proj, RESOURCES_PHASE, "files")) == 1


class TestSystemFrameworks:
    def test_strong_link(self, proj):
        proj.add_framework_to_project(TARGET_ID, "Security.framework", False)
        guid = proj.find_file_guid("System/Library/Frameworks/Security.framework")
        assert guid is not None
        body = proj._object_body(guid)
        assert "sourceTree = SDKROOT;" in body
        assert "name = Security.framework;" in body
        files = _list_ids(proj, FRAMEWORKS_PHASE, "files")
        assert len(files) == 1
        assert "ATTRIBUTES" not in proj._object_body(files[0])

    def test_weak_link(self, proj):
        proj.add_framework_to_project(TARGET_ID, "UserNotifications.framework", True)
        files = _list_ids(proj, FRAMEWORKS_PHASE, "files")
        assert "settings = {ATTRIBUTES = (Weak, ); };" in proj._object_body(files[0])

    def test_survives_reparse(self, proj):
        proj.add_framework_to_project(TARGET_ID, "Security.framework", True)
        proj.add_framework_to_project(TARGET_ID, "Security.framework", True)
        reparsed = PbxProject(proj.write_to_string())
        assert len(_list_ids(reparsed, FRAMEWORKS_PHASE, "files")) == 1
        assert reparsed.target_guid_by_name("Unity-iPhone") == TARGET_ID


class TestLargeProject:
    """文件引用很多时，查找与登记只做常数次对象定位"""

    REFS = 3000

    @pytest.fixture()
    def big(self, pbxproj_text):
        lines = "".join(
            f"\t\tBB{i:022X} /* f{i}.png */ = {{isa = PBXFileReference; "
            f"lastKnownFileType = image.png; path = Images/f{i}.png; "
            f'sourceTree = "<group>"; }};\n'
            for i in range(self.REFS)
        )
        marker = "/* End PBXFileReference section */"
        return PbxProject(pbxproj_text.replace(marker, lines + marker))

    @pytest.fixture()
    def span_calls(self, monkeypatch):
        calls: list[str] = []
        original = PbxProject._object_span

        def counting(self, obj_id):
            calls.append(obj_id)
            return original(self, obj_id)

        monkeypatch.setattr(PbxProject, "_object_span", counting)
        return calls

    def test_find_existing(self, big, span_calls):
        assert big.find_file_guid("Images/f2500.png") == f"BB{2500:022X}"
        assert big.find_file_guid("Images/f2500.pn") is None
        assert span_calls == []

    def test_add_and_build_constant_lookups(self, big, span_calls):
        guid = big.add_file("Frameworks/Foo.framework", "Frameworks/Foo.framework")
        big.add_file_to_build(TARGET_ID, guid)
        big.add_file_to_build(TARGET_ID, guid)
        assert len(span_calls) < 20
        assert len(_list_ids(big, FRAMEWORKS_PHASE, "files")) == 1

    def test_quoted_path_is_found(self, proj):
        a = proj.add_file("Resources/My Assets", "Resources/My Assets")
        assert 'path = "Resources/My Assets";' in proj.content
        assert proj.add_file("Resources/My Assets", "Resources/My Assets") == a
        assert proj.find_file_guid("main.mm") == "AA0000000000000000000002"
