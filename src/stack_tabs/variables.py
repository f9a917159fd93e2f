# =============================================================================
# Variable Resolution
# =============================================================================
# Expands ${name} placeholders in filter patterns, e.g.
#   path:${workspaceFolder}/docs/*  ->  path:/home/me/project/docs/*
# Names follow the editor's predefined variables.

import os
import re
from dataclasses import dataclass
from typing import Callable

from .host import FocusState


@dataclass(frozen=True)
class VariableContext:
    """Inputs for variable producers.

    Explicit ``document``/``workspace_folder`` values win over the focus
    state; with neither, file-related variables resolve to "".
    """

    document: str | None = None
    workspace_folder: str | None = None
    focus: FocusState | None = None


def _user_home(ctx: VariableContext) -> str:
    return os.environ.get("HOME") or os.environ.get("USERPROFILE") or ""


def _file(ctx: VariableContext) -> str:
    if ctx.document:
        return ctx.document
    if ctx.focus and ctx.focus.active_file:
        return ctx.focus.active_file
    return ""


def _workspace_folder(ctx: VariableContext) -> str:
    if ctx.workspace_folder:
        return ctx.workspace_folder
    if ctx.focus:
        return ctx.focus.workspace_folder_for(_file(ctx)) or ""
    return ""


def _workspace_folder_basename(ctx: VariableContext) -> str:
    return _workspace_folder(ctx).rstrip(os.sep).split(os.sep)[-1]


def _file_workspace_folder(ctx: VariableContext) -> str:
    if ctx.focus:
        return ctx.focus.workspace_folder_for(_file(ctx)) or ""
    return ""


def _relative_file(ctx: VariableContext) -> str:
    file = _file(ctx)
    folder = _file_workspace_folder(ctx)
    if not file or not folder:
        return ""
    return os.path.relpath(file, folder)


def _relative_file_dirname(ctx: VariableContext) -> str:
    relative = _relative_file(ctx)
    return os.path.dirname(relative) if relative else ""


def _file_basename(ctx: VariableContext) -> str:
    return os.path.basename(_file(ctx))


def _file_basename_no_extension(ctx: VariableContext) -> str:
    return os.path.splitext(_file_basename(ctx))[0]


def _file_extname(ctx: VariableContext) -> str:
    return os.path.splitext(_file_basename(ctx))[1]


def _file_dirname(ctx: VariableContext) -> str:
    file = _file(ctx)
    return os.path.dirname(file) if file else ""


def _file_dirname_basename(ctx: VariableContext) -> str:
    return os.path.basename(_file_dirname(ctx))


VARIABLES: dict[str, Callable[[VariableContext], str]] = {
    "userHome": _user_home,
    "workspaceFolder": _workspace_folder,
    "workspaceFolderBasename": _workspace_folder_basename,
    "file": _file,
    "fileWorkspaceFolder": _file_workspace_folder,
    "relativeFile": _relative_file,
    "relativeFileDirname": _relative_file_dirname,
    "fileBasename": _file_basename,
    "fileBasenameNoExtension": _file_basename_no_extension,
    "fileExtname": _file_extname,
    "fileDirname": _file_dirname,
    "fileDirnameBasename": _file_dirname_basename,
    "cwd": lambda ctx: os.getcwd(),
    "pathSeparator": lambda ctx: os.sep,
    "/": lambda ctx: os.sep,
}

VARIABLE_PATTERN = re.compile(
    r"\$\{(" + "|".join(re.escape(name) for name in VARIABLES) + r")\}"
)


def resolve_variables(template: str, context: VariableContext | None = None) -> str:
    """Replace every known ${name} in ``template`` in a single pass.

    Substituted values are never scanned again, so a file name that
    happens to contain "${file}" stays literal. Unknown names are left
    as they are.
    """
    ctx = context or VariableContext()
    values: dict[str, str] = {}

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in values:
            values[name] = VARIABLES[name](ctx)
        return values[name]

    return VARIABLE_PATTERN.sub(substitute, template)
