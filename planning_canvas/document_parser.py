"""
Planning Canvas — heuristic document parser
Reads a loosely structured planning document (markdown headings, "Key: value"
lines, bullet lists) into a ParsedDocument without any model call.
"""

import re
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .canvas_generator import GenerateCanvasInput, PromptItem, TechStackItem, generate_canvas
from .types import CanvasEdge, CanvasNode, NodeType, NoteColorTag, Position, TargetTool, TechCategory

SOURCE_EXCERPT_CHARS = 2000

# Heading alias -> ParsedDocument section (first hit wins, in this order)
SECTION_ALIASES = [
    ("idea", "description"),
    ("summary", "description"),
    ("description", "description"),
    ("overview", "description"),
    ("target user", "target_user"),
    ("target users", "target_user"),
    ("audience", "target_user"),
    ("user", "target_user"),
    ("users", "target_user"),
    ("problem", "core_problem"),
    ("problems", "core_problem"),
    ("pain", "core_problem"),
    ("features", "features"),
    ("functionality", "features"),
    ("screens", "screens"),
    ("pages", "screens"),
    ("ui", "screens"),
    ("tech stack", "tech_stack"),
    ("stack", "tech_stack"),
    ("tech", "tech_stack"),
    ("prompts", "prompts"),
    ("notes", "notes"),
]

_KEY_VALUE_RE = re.compile(r"^([A-Za-z][A-Za-z\s]+):\s*(.+)$")
_MD_HEADING_RE = re.compile(r"^#{1,6}\s+(.+)$")
_COLON_HEADING_RE = re.compile(r"^([A-Za-z][A-Za-z\s]+):$")
_BULLET_RE = re.compile(r"^[-*•]\s+(.+)$")
_NUMBERED_RE = re.compile(r"^\d+\.\s+(.+)$")
_TECH_ITEM_RE = re.compile(r"^(frontend|backend|database|auth|hosting|other)\s*[:\-]\s*(.+)$", re.IGNORECASE)
_HEADING_MARKUP_RE = re.compile(r"[#*`_]")


@dataclass
class ParsedDocument:
    app_name: str = ""
    description: str = ""
    target_user: str = ""
    core_problem: str = ""
    features: List[str] = field(default_factory=list)
    screens: List[str] = field(default_factory=list)
    tech_stack: List[TechStackItem] = field(default_factory=list)
    prompts: List[PromptItem] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    tool: str = TargetTool.CLAUDE.value
    source_excerpt: str = ""


def detect_tool(text: str) -> str:
    lowered = text.lower()
    for tool in TargetTool:
        if tool is TargetTool.OTHER:
            continue
        if tool.value.lower() in lowered:
            return tool.value
    return TargetTool.CLAUDE.value


def _section_for_heading(heading: str) -> Optional[str]:
    normalized = _HEADING_MARKUP_RE.sub("", heading).strip().lower()
    for alias, section in SECTION_ALIASES:
        if re.search(rf"\b{re.escape(alias)}\b", normalized):
            return section
    return None


def _parse_tech_item(raw: str) -> TechStackItem:
    match = _TECH_ITEM_RE.match(raw)
    if match:
        return TechStackItem(tool_name=match.group(2).strip(), category=match.group(1).strip().capitalize())
    return TechStackItem(tool_name=raw.strip(), category=TechCategory.OTHER.value)


def _extract_bullet(line: str) -> Optional[str]:
    match = _BULLET_RE.match(line) or _NUMBERED_RE.match(line)
    return match.group(1).strip() if match else None


def _apply_key_value(parsed: ParsedDocument, key: str, value: str) -> bool:
    if "app" in key or "project" in key or "name" in key:
        parsed.app_name = value
    elif "target" in key or "audience" in key or "user" in key:
        parsed.target_user = value
    elif "problem" in key or "pain" in key:
        parsed.core_problem = value
    elif "description" in key or "summary" in key or "overview" in key:
        parsed.description = value
    else:
        return False
    return True


def parse_document(text: str) -> ParsedDocument:
    """
    Parse a planning document into sections.

    Lines are read in order: recognised "Key: value" lines set idea fields,
    headings switch the current section, bullets are appended to the current
    list section (notes when none applies), and free text extends the current
    prose section or becomes a note.
    """
    trimmed = text.strip()
    parsed = ParsedDocument(tool=detect_tool(trimmed), source_excerpt=trimmed[:SOURCE_EXCERPT_CHARS])
    if not trimmed:
        return parsed

    section: Optional[str] = None
    lines = [line.strip() for line in trimmed.splitlines() if line.strip()]

    for line in lines:
        key_value = _KEY_VALUE_RE.match(line)
        if key_value and _apply_key_value(parsed, key_value.group(1).strip().lower(), key_value.group(2).strip()):
            continue

        heading = _MD_HEADING_RE.match(line) or _COLON_HEADING_RE.match(line)
        if heading:
            section = _section_for_heading(heading.group(1))
            continue

        bullet = _extract_bullet(line)
        if bullet:
            if section == "features":
                parsed.features.append(bullet)
            elif section == "screens":
                parsed.screens.append(bullet)
            elif section == "tech_stack":
                parsed.tech_stack.append(_parse_tech_item(bullet))
            elif section == "prompts":
                parsed.prompts.append(PromptItem(text=bullet, target_tool=parsed.tool))
            else:
                parsed.notes.append(bullet)
            continue

        if section in ("description", "target_user", "core_problem"):
            current = getattr(parsed, section)
            setattr(parsed, section, f"{current} {line}" if current else line)
            continue

        parsed.notes.append(line)

    if not parsed.description and parsed.notes:
        parsed.description = parsed.notes[0]
    return parsed


def parse_document_to_canvas(text: str) -> Tuple[List[CanvasNode], List[CanvasEdge]]:
    """
    Full canvas for a document: generated columns plus an "Imported Document"
    note holding the source excerpt, linked to the idea node.
    """
    parsed = parse_document(text)
    if not parsed.source_excerpt:
        return [], []

    nodes, edges = generate_canvas(
        GenerateCanvasInput(
            app_name=parsed.app_name,
            description=parsed.description,
            target_user=parsed.target_user,
            core_problem=parsed.core_problem,
            features=parsed.features,
            screens=parsed.screens,
            tool=parsed.tool,
            tech_stack=parsed.tech_stack,
            prompts=parsed.prompts,
        )
    )

    idea = next((n for n in nodes if n.type == NodeType.IDEA), None)
    anchor = idea.position if idea else Position(0, 0)
    note = CanvasNode(
        id=f"note-import-{uuid.uuid4().hex[:8]}",
        type=NodeType.NOTE,
        position=Position(anchor.x - 320, anchor.y + 180),
        data={
            "title": "Imported Document",
            "body": parsed.source_excerpt,
            "colorTag": NoteColorTag.SLATE.value,
            "expanded": True,
            "completed": False,
        },
    )
    nodes.append(note)
    if idea is not None:
        edges.append(CanvasEdge(id=f"e-{note.id}-{idea.id}", source=note.id, target=idea.id))
    return nodes, edges
