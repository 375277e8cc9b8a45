"""project.pbxproj 文本级读写

按对象 ID 定位块、按 section 注释插入新对象，只实现流水线需要的操作:
查找目标、改写构建设置、登记文件引用、加入构建阶段、链接系统框架。
未触及的文本原样保留。
"""

from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path, PurePosixPath
from typing import Callable

from iosresolver.core.exceptions import ProjectFileError

logger = logging.getLogger(__name__)

_ID = r"[0-9A-Fa-f]{24}"
_TOKEN_RE = re.compile(
    r'\s+|/\*.*?\*/|//[^\n]*|"(?:[^"\\]|\\.)*"|[^\s=;(),{}"]+|[=;(),{}]',
    re.DOTALL,
)
_BARE_RE = re.compile(r"^[A-Za-z0-9_$/:.\-]+$")

_Settings = list[tuple[str, str | list[str]]]

FILE_TYPES = {
    ".framework": "wrapper.framework",
    ".a": "archive.ar",
    ".dylib": "compiled.mach-o.dylib",
    ".tbd": "sourcecode.text-based-dylib-definition",
    ".bundle": "wrapper.plug-in",
    ".png": "image.png",
    ".jpg": "image.jpeg",
    ".plist": "text.plist.xml",
    ".strings": "text.plist.strings",
    ".json": "text.json",
    ".xib": "file.xib",
    ".storyboard": "file.storyboard",
    ".nib": "wrapper.nib",
}
LINKABLE_TYPES = {
    "wrapper.framework",
    "archive.ar",
    "compiled.mach-o.dylib",
    "sourcecode.text-based-dylib-definition",
}


def quote(value: str) -> str:
    """按 pbxproj 规则在需要时加引号"""
    if _BARE_RE.match(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def unquote(token: str) -> str:
    if len(token) >= 2 and token[0] == '"' and token[-1] == '"':
        return re.sub(r"\\(.)", r"\1", token[1:-1])
    return token


def file_type_for(path: str) -> str:
    suffix = PurePosixPath(path).suffix.lower()
    if not suffix:
        return "folder"
    return FILE_TYPES.get(suffix, "file")


def _matching_brace(text: str, open_idx: int, open_ch: str = "{", close_ch: str = "}") -> int:
    """返回与 open_idx 处括号匹配的闭括号下标，跳过引号和注释"""
    depth = 0
    i = open_idx
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            i += 1
            while i < n and text[i] != '"':
                i += 2 if text[i] == "\\" else 1
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 1
        elif ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise ProjectFileError(f"括号不匹配 (位置 {open_idx})")


def _parse_settings(inner: str) -> _Settings:
    """解析 buildSettings 块内容为有序 (键, 值) 列表，值为字符串或字符串列表"""
    tokens = [
        t for t in _TOKEN_RE.findall(inner)
        if not t.isspace() and not t.startswith(("/*", "//"))
    ]
    entries: _Settings = []
    i = 0
    while i < len(tokens):
        key = tokens[i]
        if i + 2 >= len(tokens) or tokens[i + 1] != "=":
            raise ProjectFileError(f"无法解析的构建设置: {key}")
        i += 2
        if tokens[i] == "(":
            values: list[str] = []
            i += 1
            while i < len(tokens) and tokens[i] != ")":
                if tokens[i] != ",":
                    values.append(unquote(tokens[i]))
                i += 1
            entries.append((key, values))
            i += 1
        elif tokens[i] == "{":
            raise ProjectFileError(f"构建设置 {key} 不支持嵌套字典")
        else:
            entries.append((key, unquote(tokens[i])))
            i += 1
        if i < len(tokens) and tokens[i] == ";":
            i += 1
    return entries


def _render_settings(entries: _Settings, indent: str) -> str:
    lines = []
    for key, value in entries:
        if isinstance(value, list):
            items = "".join(f"{indent}\t{quote(v)},\n" for v in value)
            lines.append(f"{indent}{key} = (\n{items}{indent});\n")
        else:
            lines.append(f"{indent}{key} = {quote(value)};\n")
    return "".join(lines)


class PbxProject:
    """project.pbxproj 文本模型（ProjectMutator 的默认实现）"""

    def __init__(self, content: str = "") -> None:
        self.content = ""
        if content:
            self.read_from_string(content)

    # ---- 读写 ----

    @classmethod
    def load(cls, path: str | Path) -> PbxProject:
        p = Path(path)
        if not p.exists():
            raise ProjectFileError(f"工程文件不存在: {p}")
        return cls(p.read_text(encoding="utf-8"))

    def read_from_string(self, content: str) -> None:
        if "objects = {" not in content or "rootObject" not in content:
            raise ProjectFileError("不是有效的 project.pbxproj 内容")
        self.content = content

    def write_to_string(self) -> str:
        return self.content

    # ---- 对象定位 ----

    def _object_span(self, obj_id: str) -> tuple[int, int]:
        """返回对象块 {...} 的起止下标（含两端括号）"""
        m = re.search(
            rf"^\s*{obj_id}(?: /\*.*?\*/)? = \{{", self.content, re.MULTILINE,
        )
        if m is None:
            raise ProjectFileError(f"对象不存在: {obj_id}")
        start = m.end() - 1
        return start, _matching_brace(self.content, start)

    def _object_body(self, obj_id: str) -> str:
        start, end = self._object_span(obj_id)
        return self.content[start + 1:end]

    @staticmethod
    def _field(body: str, name: str) -> str | None:
        m = re.search(
            rf'(?:^|[\s{{;]){name} = ("(?:[^"\\]|\\.)*"|[^;\s]+)', body,
        )
        return unquote(m.group(1)) if m else None

    @staticmethod
    def _id_list(body: str, name: str) -> list[str]:
        m = re.search(rf"\b{name} = \((.*?)\);", body, re.DOTALL)
        if m is None:
            return []
        inner = re.sub(r"/\*.*?\*/", "", m.group(1), flags=re.DOTALL)
        return re.findall(_ID, inner)

    def _objects_of(self, isa: str) -> list[str]:
        pattern = rf"^\s*({_ID})(?: /\*.*?\*/)? = \{{\s*isa = {isa};"
        return re.findall(pattern, self.content, re.MULTILINE)

    def _objects_with(self, isa: str, name: str, value_pattern: str) -> list[str]:
        """单次扫描全文，返回 isa 匹配且字段 name 取值匹配 value_pattern 的对象 ID

        只适用于不含嵌套字典的字段段落（isa 之后、第一个 { 之前）。
        """
        pattern = (
            rf"^[ \t]*({_ID})(?: /\*.*?\*/)? = \{{\s*isa = {isa};"
            rf"[^{{}}]*?(?<=[\s;]){name} = (?:{value_pattern})(?=[;\s])"
        )
        return re.findall(pattern, self.content, re.MULTILINE)

    def _new_guid(self) -> str:
        while True:
            guid = uuid.uuid4().hex[:24].upper()
            if guid not in self.content:
                return guid

    def _insert_object(self, section: str, line: str) -> None:
        marker = f"/* End {section} section */"
        idx = self.content.find(marker)
        if idx == -1:
            anchor = self.content.find("objects = {")
            if anchor == -1:
                raise ProjectFileError("缺少 objects 段")
            anchor = self.content.index("\n", anchor) + 1
            block = (
                f"\n/* Begin {section} section */\n{line}\n"
                f"/* End {section} section */\n"
            )
            self.content = self.content[:anchor] + block + self.content[anchor:]
            return
        line_start = self.content.rfind("\n", 0, idx) + 1
        self.content = (
            self.content[:line_start] + line + "\n" + self.content[line_start:]
        )

    def _append_to_list(self, obj_id: str, name: str, entry: str) -> None:
        start, end = self._object_span(obj_id)
        block = self.content[start:end + 1]
        m = re.search(rf"\n([ \t]*){name} = \((.*?)\);", block, re.DOTALL)
        if m is None:
            raise ProjectFileError(f"对象 {obj_id} 没有 {name} 列表")
        indent = m.group(1)
        inner = m.group(2).rstrip()
        new_list = f"\n{indent}{name} = ({inner}\n{indent}\t{entry},\n{indent});"
        block = block[:m.start()] + new_list + block[m.end():]
        self.content = self.content[:start] + block + self.content[end + 1:]

    # ---- 目标与构建设置 ----

    def target_guid_by_name(self, name: str) -> str:
        for guid in self._objects_of("PBXNativeTarget"):
            if self._field(self._object_body(guid), "name") == name:
                return guid
        raise ProjectFileError(f"找不到目标: {name}")

    def _build_configurations(self, target: str) -> list[str]:
        config_list = self._field(self._object_body(target), "buildConfigurationList")
        if not config_list:
            raise ProjectFileError(f"目标 {target} 没有 buildConfigurationList")
        return self._id_list(self._object_body(config_list), "buildConfigurations")

    def _edit_settings(
        self, config_id: str, edit: Callable[[_Settings], None],
    ) -> None:
        start, end = self._object_span(config_id)
        block = self.content[start:end + 1]
        m = re.search(r"\n([ \t]*)buildSettings = \{", block)
        if m is None:
            raise ProjectFileError(f"配置 {config_id} 没有 buildSettings")
        open_idx = m.end() - 1
        close_idx = _matching_brace(block, open_idx)
        indent = m.group(1)
        entries = _parse_settings(block[open_idx + 1:close_idx])
        edit(entries)
        rendered = "{\n" + _render_settings(entries, indent + "\t") + indent + "}"
        block = block[:open_idx] + rendered + block[close_idx + 1:]
        self.content = self.content[:start] + block + self.content[end + 1:]

    def get_build_property(self, target: str, name: str) -> list[str]:
        """第一个构建配置中的设置值（统一成列表），用于检查"""
        configs = self._build_configurations(target)
        if not configs:
            return []
        start, end = self._object_span(configs[0])
        block = self.content[start:end + 1]
        m = re.search(r"buildSettings = \{", block)
        if m is None:
            return []
        close_idx = _matching_brace(block, m.end() - 1)
        for key, value in _parse_settings(block[m.end():close_idx]):
            if unquote(key) == name:
                return value if isinstance(value, list) else [value]
        return []

    def set_build_property(self, target: str, name: str, value: str) -> None:
        def edit(entries: _Settings) -> None:
            for i, (key, _) in enumerate(entries):
                if unquote(key) == name:
                    entries[i] = (key, value)
                    return
            entries.append((quote(name), value))

        for config in self._build_configurations(target):
            self._edit_settings(config, edit)

    def add_build_property(self, target: str, name: str, value: str) -> None:
        def edit(entries: _Settings) -> None:
            for i, (key, current) in enumerate(entries):
                if unquote(key) == name:
                    values = current if isinstance(current, list) else [current]
                    entries[i] = (key, [*values, value])
                    return
            entries.append((quote(name), value))

        for config in self._build_configurations(target):
            self._edit_settings(config, edit)

    # ---- 文件与构建阶段 ----

    def _main_group(self) -> str:
        root = self._field(self.content, "rootObject")
        group = self._field(self._object_body(root), "mainGroup") if root else None
        if not group:
            raise ProjectFileError("找不到 mainGroup")
        return group

    def find_file_guid(self, path: str) -> str | None:
        quoted = quote(path)
        if quoted == path:
            quoted = f'"{path}"'
        forms = {re.escape(path), re.escape(quoted)}
        found = self._objects_with("PBXFileReference", "path", "|".join(sorted(forms)))
        return found[0] if found else None

    def add_file(
        self, path: str, project_path: str, source_tree: str = "SOURCE_ROOT",
    ) -> str:
        """登记文件引用并挂到 mainGroup，同路径重复登记返回已有 guid"""
        existing = self.find_file_guid(path)
        if existing:
            return existing
        guid = self._new_guid()
        name = PurePosixPath(project_path).name
        self._insert_object(
            "PBXFileReference",
            f"\t\t{guid} /* {name} */ = {{isa = PBXFileReference; "
            f"lastKnownFileType = {file_type_for(path)}; name = {quote(name)}; "
            f"path = {quote(path)}; sourceTree = {source_tree}; }};",
        )
        self._append_to_list(self._main_group(), "children", f"{guid} /* {name} */")
        logger.debug("登记文件引用: %s -> %s", path, guid)
        return guid

    def _phase_of(self, target: str, isa: str) -> str:
        phases = set(self._objects_of(isa))
        for phase in self._id_list(self._object_body(target), "buildPhases"):
            if phase in phases:
                return phase
        raise ProjectFileError(f"目标 {target} 没有 {isa}")

    def _add_build_file(
        self, target: str, file_guid: str, settings: str = "",
    ) -> None:
        body = self._object_body(file_guid)
        name = self._field(body, "name") or self._field(body, "path") or file_guid
        if self._field(body, "lastKnownFileType") in LINKABLE_TYPES:
            isa, phase_name = "PBXFrameworksBuildPhase", "Frameworks"
        else:
            isa, phase_name = "PBXResourcesBuildPhase", "Resources"
        phase = self._phase_of(target, isa)
        phase_files = set(self._id_list(self._object_body(phase), "files"))
        refs = self._objects_with("PBXBuildFile", "fileRef", re.escape(file_guid))
        if phase_files.intersection(refs):
            return
        guid = self._new_guid()
        extra = f" settings = {settings};" if settings else ""
        self._insert_object(
            "PBXBuildFile",
            f"\t\t{guid} /* {name} in {phase_name} */ = {{isa = PBXBuildFile; "
            f"fileRef = {file_guid} /* {name} */;{extra} }};",
        )
        self._append_to_list(phase, "files", f"{guid} /* {name} in {phase_name} */")

    def add_file_to_build(self, target: str, file_guid: str) -> None:
        self._add_build_file(target, file_guid)

    def add_framework_to_project(
        self, target: str, framework: str, weak: bool,
    ) -> None:
        path = f"System/Library/Frameworks/{framework}"
        guid = self.add_file(path, framework, source_tree="SDKROOT")
        settings = "{ATTRIBUTES = (Weak, ); }" if weak else ""
        self._add_build_file(target, guid, settings)
