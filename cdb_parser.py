#!/usr/bin/env python3
"""
ANSYS CDB Mesh File Parser
==========================

A reader for ANSYS .cdb mesh export files (blocked ASCII format).

This script provides:
1. Node import from NBLOCK coordinate blocks
2. Element import from EBLOCK connectivity blocks, including degenerate
   element forms and element type changes in the middle of a block
3. Node component (CMBLOCK) import with compressed range syntax
4. Mesh summary report and statistics export

The mesh is read into a cdb_mesh.Mesh: dense 0-based node and element ids,
one partition (subdomain) per element block and topology, one node group per
node component.

Usage:
    python3 cdb_parser.py <cdb_file>
    python3 cdb_parser.py model.cdb --verbose
    python3 cdb_parser.py model.cdb --export-stats stats.json
    python3 cdb_parser.py model.cdb --show-issues
    python3 cdb_parser.py model.cdb --allow-duplicate-nodes

Options:
    --verbose                Show progress logging and parsing issues
    --show-issues            Display parsing warnings
    --allow-duplicate-nodes  Let a repeated node number replace the earlier one
    --export-stats           Export mesh statistics to JSON file
"""

import json
import logging
import re
import sys
import warnings
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from cdb_element_types import ELEMENT_TABLE, ElementTypeTable
from cdb_errors import (
    DuplicateForeignNodeIdError,
    MalformedDeclarationError,
    MalformedNumericLineError,
    ParseError,
    ParseWarning,
    StreamUnreadableError,
    UnexpectedEndOfStreamError,
    UnresolvedNodeReferenceError,
    format_message,
)
from cdb_mesh import Mesh


logger = logging.getLogger(__name__)


NBLOCK_KEYWORD = "NBLOCK,6,SOLID"
ET_KEYWORD = "ET,"
TYPE_KEYWORD = "TYPE,"
CMBLOCK_KEYWORD = "CMBLOCK,"

# EBLOCK record: 8 attribute fields, node count, unused field, element id
ELEMENT_ATTRIBUTE_FIELDS = 8
ELEMENT_HEADER_FIELDS = 11
NODES_PER_RECORD_LINE = 8
GROUP_VALUES_PER_LINE = 8

_FLOAT = r"[-+]?(?:\d+\.\d*|\.\d+)(?:[Ee][-+]?\d+|[-+]\d+)?"

# node id, solid model entity, line location, then up to 6 reals (x y z and rotations)
NODE_INT_FIELDS = 3
NODE_REAL_FIELDS = 6
# NBLOCK format statement, e.g. (3i9,6e21.13e3) or (3i8,6e20.13)
NODE_FORMAT_RE = re.compile(r"^\s*\(\s*(\d+)i(\d+)\s*,\s*(\d+)[eEgG](\d+)\.\d+(?:e\d+)?\s*\)", re.IGNORECASE)
# whitespace separated records, used when the format statement is not understood
NODE_RECORD_RE = re.compile(rf"^\s+\d+\s+\d+\s+\d+(?:\s+{_FLOAT}){{0,6}}\s*\r?$")
NODE_RECORD_START_RE = re.compile(r"^\s+\d+(?=\s|$)")
GROUP_RECORD_RE = re.compile(r"^(?:\s+-?\d+)+\s*\r?$")
_INT_RE = re.compile(r"^[-+]?\d+$")
_FORTRAN_EXPONENT_RE = re.compile(r"(?<=[\d.])([-+]\d+)$")


class BlockKind(Enum):
    """Kind of block started by a line"""
    COORDINATES = "coordinates"
    ELEMENT_TYPE = "element_type"
    ELEMENT_BLOCK = "element_block"
    NODE_GROUP = "node_group"
    UNRECOGNIZED = "unrecognized"
    END_OF_STREAM = "end_of_stream"


def tokenize(line: str, delimiter: str = ',') -> List[str]:
    """Split a keyword line on a single delimiter, keeping empty fields"""
    return line.rstrip('\r\n').split(delimiter)


def parse_signed_int_fields(line: str, line_num: Optional[int] = None) -> List[int]:
    """Parse whitespace separated signed integers"""
    values = []
    for token in line.split():
        if not _INT_RE.match(token):
            raise MalformedNumericLineError(format_message(f"Invalid integer field '{token}'", line_num))
        values.append(int(token))
    return values


def _parse_real(token: str) -> float:
    # Fortran writers may drop the exponent letter: 1.5-3
    if 'e' not in token.lower():
        token = _FORTRAN_EXPONENT_RE.sub(r"E\1", token)
    return float(token)


@dataclass(frozen=True)
class NodeRecordLayout:
    """Fixed column widths of NBLOCK records"""
    int_width: int
    real_width: int
    n_reals: int = NODE_REAL_FIELDS


def parse_node_format(line: Optional[str]) -> Optional[NodeRecordLayout]:
    """Read the column layout from an NBLOCK format statement, None if not understood"""
    if line is None:
        return None
    match = NODE_FORMAT_RE.match(line)
    if not match:
        return None
    n_ints, int_width, n_reals, real_width = (int(g) for g in match.groups())
    if n_ints != NODE_INT_FIELDS or int_width == 0 or real_width == 0:
        return None
    return NodeRecordLayout(int_width, real_width, n_reals)


def split_node_record(line: str, layout: NodeRecordLayout, line_num: Optional[int] = None):
    """Slice a fixed-width node record into (foreign id, coordinates)

    Columns may touch: a negative real fills its whole field. Trailing
    fields that are absent default to 0.0.
    """
    line = line.rstrip('\r\n ')
    width = layout.int_width
    ints = [line[i * width:(i + 1) * width].strip() for i in range(NODE_INT_FIELDS)]
    if not all(_INT_RE.match(token) for token in ints):
        raise MalformedNumericLineError(format_message(f"Malformed node record: '{line.strip()}'", line_num))

    rest = line[NODE_INT_FIELDS * width:]
    fields = [rest[i:i + layout.real_width] for i in range(0, len(rest), layout.real_width)]
    if len(fields) > layout.n_reals:
        raise MalformedNumericLineError(format_message(f"Node record has too many fields: '{line.strip()}'", line_num))

    coords = []
    for token in fields[:3]:
        try:
            coords.append(_parse_real(token.strip()))
        except ValueError:
            raise MalformedNumericLineError(
                format_message(f"Invalid coordinate '{token.strip()}' in node record", line_num)) from None
    coords.extend([0.0] * (3 - len(coords)))
    return int(ints[0]), coords


def expand_node_ranges(values: Iterable[int], ids: List[int], line_num: Optional[int] = None) -> List[int]:
    """Append component values to ids, expanding ranges

    A negative value -v closes a range: every integer after the previous
    member up to and including v is added. "1 2 4 -6" gives 1 2 4 5 6.
    A range ending below its start adds v alone.

    Returns:
        The ids list, extended in place
    """
    for value in values:
        if value >= 0:
            ids.append(value)
            continue
        if not ids:
            raise MalformedNumericLineError(format_message(f"Range end {value} has no start value", line_num))
        start, stop = ids[-1], -value
        if stop < start:
            ids.append(stop)
            continue
        ids.extend(range(start + 1, stop + 1))
    return ids


def classify_line(line: Optional[str]) -> BlockKind:
    """Decide which block, if any, a line starts"""
    if line is None:
        return BlockKind.END_OF_STREAM
    if line.startswith(NBLOCK_KEYWORD):
        return BlockKind.COORDINATES
    if line.startswith(ET_KEYWORD):
        return BlockKind.ELEMENT_TYPE
    if line.startswith(TYPE_KEYWORD):
        return BlockKind.ELEMENT_BLOCK
    if CMBLOCK_KEYWORD in line:
        return BlockKind.NODE_GROUP
    return BlockKind.UNRECOGNIZED


def is_block_terminator(line: str) -> bool:
    """EBLOCK data ends with a -1 record"""
    return "-1" in line.split()


class LineCursor:
    """Buffered line cursor with one-line lookahead and a single rewind mark

    Lines are returned without their trailing newline. Consumed lines are
    dropped from the buffer unless a mark is active.
    """

    _COMPACT_THRESHOLD = 1024

    def __init__(self, stream: Iterable[str]):
        self._stream = iter(stream)
        self._buffer: List[str] = []
        self._pos = 0
        self._mark = None
        self._exhausted = False
        self.line_num = 0

    def _fill(self) -> bool:
        if self._pos < len(self._buffer):
            return True
        if self._exhausted:
            return False
        line = next(self._stream, None)
        if line is None:
            self._exhausted = True
            return False
        self._buffer.append(line.rstrip('\n'))
        return True

    def peek(self) -> Optional[str]:
        """Return the next line without consuming it, None at end of stream"""
        if not self._fill():
            return None
        return self._buffer[self._pos]

    def next_line(self) -> Optional[str]:
        """Consume and return the next line, None at end of stream"""
        line = self.peek()
        if line is None:
            return None
        self._pos += 1
        self.line_num += 1
        self._compact()
        return line

    def mark(self) -> None:
        """Remember the current position for a later rewind()"""
        self._mark = (self._pos, self.line_num)

    def rewind(self) -> None:
        """Return to the marked position and clear the mark"""
        if self._mark is None:
            raise RuntimeError("rewind() without mark()")
        self._pos, self.line_num = self._mark
        self._mark = None

    def release(self) -> None:
        """Clear the mark without moving"""
        self._mark = None
        self._compact()

    def _compact(self) -> None:
        if self._mark is None and self._pos >= self._COMPACT_THRESHOLD:
            del self._buffer[:self._pos]
            self._pos = 0


@dataclass
class ImportSession:
    """Running state of one import: id counters, node map and diagnostics"""
    mesh: Mesh
    node_id: int = 0
    elem_id: int = 0
    partition_id: int = 1
    group_id: int = 1
    element_type_code: Optional[int] = None
    node_map: Dict[int, int] = field(default_factory=dict)
    partition_names: Dict[int, str] = field(default_factory=dict)
    group_names: Dict[int, str] = field(default_factory=dict)
    parse_warnings: List[str] = field(default_factory=list)
    skipped_lines: int = 0
    name_counts: Dict[str, int] = field(default_factory=dict)

    def add_warning(self, message: str, line_num: Optional[int] = None) -> None:
        """Record a diagnostic that does not stop the import"""
        warning_msg = format_message(message, line_num)
        self.parse_warnings.append(warning_msg)
        warnings.warn(warning_msg, ParseWarning, stacklevel=3)

    def unique_partition_name(self, name: str) -> str:
        """Return name, or name_<n> when it is already taken in this import"""
        taken = set(self.partition_names.values())
        count = self.name_counts.get(name, 0) + 1
        candidate = name if count == 1 else f"{name}_{count}"
        while candidate in taken:
            count += 1
            candidate = f"{name}_{count}"
        self.name_counts[name] = count
        return candidate

    def resolve_node(self, foreign_id: int, line_num: Optional[int] = None) -> int:
        try:
            return self.node_map[foreign_id]
        except KeyError:
            raise UnresolvedNodeReferenceError(
                format_message(f"Node {foreign_id} is not defined in the NBLOCK", line_num)) from None

    def summary(self) -> Dict[str, object]:
        return {
            'nodes_read': self.node_id,
            'elements_read': self.elem_id,
            'partitions': dict(self.partition_names),
            'groups': dict(self.group_names),
            'skipped_lines': self.skipped_lines,
            'warnings': list(self.parse_warnings),
        }


class CDBReader:
    """Reader for ANSYS CDB files

    The reader is serial: the whole file is read in one pass into the given
    mesh, which is cleared first. On a parse error the mesh is marked partial
    (mesh.is_valid is False) and the error is re-raised.

    Usage:
        >>> mesh = Mesh()
        >>> reader = CDBReader(mesh)
        >>> session = reader.read('model.cdb')
        >>> reader.print_concise_report()

    Options:
        element_table    Table of supported element types (default: ELEMENT_TABLE)
        duplicate_nodes  "error" rejects a node number seen twice unless the
                         coordinates are identical, "overwrite" lets the later
                         record replace the earlier mapping
        encoding         Text encoding used when a path is given
    """

    DUPLICATE_POLICIES = ("error", "overwrite")

    def __init__(self, mesh: Mesh, element_table: Optional[ElementTypeTable] = None,
                 duplicate_nodes: str = "error", encoding: str = "utf-8"):
        if duplicate_nodes not in self.DUPLICATE_POLICIES:
            raise ValueError(f"duplicate_nodes must be one of {self.DUPLICATE_POLICIES}, got {duplicate_nodes!r}")
        self.mesh = mesh
        self.element_table = element_table if element_table is not None else ELEMENT_TABLE
        self.duplicate_nodes = duplicate_nodes
        self.encoding = encoding
        self.source_name: str = "<stream>"
        self.session: Optional[ImportSession] = None

    def read(self, source: Union[str, Path, Iterable[str]]) -> ImportSession:
        """Read a CDB file from a path or from an open text stream"""
        if not isinstance(source, (str, Path)):
            self.source_name = getattr(source, 'name', "<stream>")
            return self.read_stream(source)

        filepath = Path(source)
        self.source_name = filepath.name
        logger.info(f"Reading CDB file: {filepath}")
        try:
            f = open(filepath, 'r', encoding=self.encoding)
        except OSError as e:
            self.mesh.clear()
            self.mesh.mark_partial()
            raise StreamUnreadableError(f"Cannot open {filepath}: {e}") from e
        with f:
            return self.read_stream(f)

    def read_stream(self, stream: Iterable[str]) -> ImportSession:
        """Read CDB data from an iterable of lines"""
        self.mesh.clear()
        session = ImportSession(self.mesh)
        self.session = session
        cursor = LineCursor(stream)

        try:
            self._read_blocks(cursor, session)
        except ParseError:
            self.mesh.mark_partial()
            raise
        except UnicodeDecodeError as e:
            self.mesh.mark_partial()
            raise StreamUnreadableError(
                format_message(f"File contains invalid characters: {e}", cursor.line_num + 1)) from e
        except OSError as e:
            self.mesh.mark_partial()
            raise StreamUnreadableError(f"Stream is bad: {e}") from e

        logger.info(f"Read {session.node_id} nodes, {session.elem_id} elements, "
                    f"{len(session.partition_names)} partitions, {len(session.group_names)} node groups")
        return session

    def _read_blocks(self, cursor: LineCursor, session: ImportSession) -> None:
        while True:
            line = cursor.next_line()
            kind = classify_line(line)

            if kind is BlockKind.END_OF_STREAM:
                break
            elif kind is BlockKind.COORDINATES:
                self._read_nodes(cursor, session)
            elif kind is BlockKind.ELEMENT_TYPE:
                self._read_element_type(line, cursor.line_num, session)
            elif kind is BlockKind.ELEMENT_BLOCK:
                self._read_elements(cursor, session)
            elif kind is BlockKind.NODE_GROUP:
                self._read_node_group(line, cursor, session)
            else:
                session.skipped_lines += 1
                logger.debug(f"Line {cursor.line_num}: skipping '{line.strip()}'")

    def _read_nodes(self, cursor: LineCursor, session: ImportSession) -> None:
        """Parse an NBLOCK: format line, then one node record per line"""
        start_line = cursor.line_num
        # format statement, e.g. (3i9,6e21.13e3)
        layout = parse_node_format(cursor.next_line())
        if layout is None:
            logger.debug(format_message("NBLOCK format not understood, splitting records on whitespace", start_line + 1))

        count = 0
        while True:
            line = cursor.peek()
            if line is None or not self._is_node_record(line, layout):
                break
            cursor.next_line()
            line_num = cursor.line_num

            if layout is not None:
                foreign_id, coords = split_node_record(line, layout, line_num)
            else:
                if not NODE_RECORD_RE.match(line):
                    raise MalformedNumericLineError(format_message(f"Malformed node record: '{line.strip()}'", line_num))
                parts = line.split()
                foreign_id = int(parts[0])
                coords = [_parse_real(p) for p in parts[3:6]]
                coords.extend([0.0] * (3 - len(coords)))

            if foreign_id in session.node_map and not self._accept_duplicate(foreign_id, coords, session, line_num):
                continue

            self.mesh.add_point(coords, session.node_id)
            session.node_map[foreign_id] = session.node_id
            session.node_id += 1
            count += 1

        logger.debug(f"Line {start_line}: NBLOCK with {count} nodes")

    @staticmethod
    def _is_node_record(line: str, layout: Optional[NodeRecordLayout]) -> bool:
        """A node record starts with the node number in its first column"""
        if layout is None:
            return bool(NODE_RECORD_START_RE.match(line))
        return line[:layout.int_width].strip().isdigit()

    def _accept_duplicate(self, foreign_id: int, coords: List[float], session: ImportSession, line_num: int) -> bool:
        """Decide whether a repeated node number creates a new point"""
        if self.duplicate_nodes == "overwrite":
            session.add_warning(f"Node {foreign_id} defined again, later definition replaces the earlier one", line_num)
            return True

        previous = self.mesh.point(session.node_map[foreign_id])
        if tuple(coords) == previous:
            session.add_warning(f"Node {foreign_id} repeated with identical coordinates, ignored", line_num)
            return False
        raise DuplicateForeignNodeIdError(
            format_message(f"Node {foreign_id} defined twice with different coordinates", line_num))

    def _read_element_type(self, line: str, line_num: int, session: ImportSession) -> None:
        """Parse an ET line: ET,<itype>,<element type code>"""
        tokens = tokenize(line)
        if len(tokens) < 3 or not _INT_RE.match(tokens[2].strip()):
            raise MalformedDeclarationError(format_message(f"Malformed element type declaration: '{line.strip()}'", line_num))
        session.element_type_code = int(tokens[2])
        if session.element_type_code not in self.element_table:
            logger.warning(format_message(f"Element type {session.element_type_code} is not supported", line_num))
        logger.debug(format_message(f"Element type {session.element_type_code} declared", line_num))

    def _read_elements(self, cursor: LineCursor, session: ImportSession) -> None:
        """Parse an element block: TYPE line, EBLOCK line, format line, records, -1, block name"""
        start_line = cursor.line_num
        code = session.element_type_code
        if code is None:
            raise MalformedDeclarationError(format_message("Element block found before any ET declaration", start_line))

        # EBLOCK keyword line and format statement
        for _ in range(2):
            if cursor.next_line() is None:
                raise UnexpectedEndOfStreamError(format_message("File ends inside element block header", cursor.line_num))

        # (partition id, topology name) for each partition opened by this block
        block_partitions = []
        prev_elem_nodes = None

        while True:
            line = cursor.next_line()
            if line is None:
                raise UnexpectedEndOfStreamError(
                    format_message(f"Element block started at line {start_line} has no -1 terminator", cursor.line_num))
            if is_block_terminator(line):
                break
            line_num = cursor.line_num

            fields = parse_signed_int_fields(line, line_num)
            if len(fields) < ELEMENT_HEADER_FIELDS:
                raise MalformedNumericLineError(format_message(
                    f"Element record has {len(fields)} fields, expected at least {ELEMENT_HEADER_FIELDS}", line_num))
            n_cdb_nodes = fields[ELEMENT_ATTRIBUTE_FIELDS]
            ansys_elem_id = fields[ELEMENT_ATTRIBUTE_FIELDS + 2]

            n_first_line = min(n_cdb_nodes, NODES_PER_RECORD_LINE)
            nodes = fields[ELEMENT_HEADER_FIELDS:ELEMENT_HEADER_FIELDS + n_first_line]
            if n_cdb_nodes < 1 or len(nodes) < n_first_line:
                raise MalformedNumericLineError(format_message(
                    f"Element {ansys_elem_id} declares {n_cdb_nodes} nodes but lists {len(nodes)}", line_num))

            if n_cdb_nodes > NODES_PER_RECORD_LINE:
                continuation = cursor.next_line()
                if continuation is None:
                    raise UnexpectedEndOfStreamError(
                        format_message(f"Element {ansys_elem_id} is missing its second node line", cursor.line_num))
                remaining = parse_signed_int_fields(continuation, cursor.line_num)
                n_remaining = n_cdb_nodes - NODES_PER_RECORD_LINE
                if len(remaining) < n_remaining:
                    raise MalformedNumericLineError(format_message(
                        f"Element {ansys_elem_id} expects {n_remaining} more nodes, found {len(remaining)}",
                        cursor.line_num))
                nodes.extend(remaining[:n_remaining])

            # Degenerate elements repeat node numbers, so the declared count
            # is not the topology's node count
            nodes = list(dict.fromkeys(nodes))
            n_elem_nodes = len(nodes)

            sub_type = self.element_table.lookup(code, n_elem_nodes)

            if prev_elem_nodes is None:
                block_partitions.append((session.partition_id, sub_type.name))
            elif prev_elem_nodes != n_elem_nodes:
                session.partition_id += 1
                block_partitions.append((session.partition_id, sub_type.name))
                session.add_warning(
                    f"Element type change mid block: element {ansys_elem_id} is {sub_type.name}, "
                    f"continuing in partition {session.partition_id}", line_num)

            local_nodes = [session.resolve_node(n, line_num) for n in sub_type.apply(nodes)]

            elem = self.mesh.add_elem(sub_type.elem_type, session.elem_id)
            session.elem_id += 1
            elem.set_partition(session.partition_id)
            for slot, node_id in enumerate(local_nodes):
                elem.set_node(slot, node_id)

            prev_elem_nodes = n_elem_nodes

        # The line after the -1 record carries the block name as its second field
        name_line = cursor.next_line()
        if name_line is None:
            raise UnexpectedEndOfStreamError(format_message("File ends before element block name", cursor.line_num))
        tokens = tokenize(name_line)
        if len(tokens) < 2:
            raise MalformedDeclarationError(format_message(f"No block name in '{name_line.strip()}'", cursor.line_num))
        block_name = tokens[1].strip()

        for partition_id, type_name in block_partitions:
            name = session.unique_partition_name(f"{block_name}_{type_name}")
            self.mesh.set_partition_name(partition_id, name)
            session.partition_names[partition_id] = name

        logger.debug(f"Line {start_line}: element block '{block_name}' -> partitions "
                     f"{[pid for pid, _ in block_partitions]}")
        session.partition_id += 1

    def _read_node_group(self, header: str, cursor: LineCursor, session: ImportSession) -> None:
        """Parse a CMBLOCK: header, format line, then records of up to 8 values"""
        header_line = cursor.line_num
        tokens = tokenize(header)
        if len(tokens) < 2:
            raise MalformedDeclarationError(format_message(f"Malformed component header: '{header.strip()}'", header_line))
        group_name = tokens[1].strip()
        entity = tokens[2].strip().upper() if len(tokens) > 2 else "NODE"

        declared_count = None
        if len(tokens) > 3 and tokens[3].strip():
            if not _INT_RE.match(tokens[3].strip()):
                raise MalformedDeclarationError(
                    format_message(f"Invalid entry count '{tokens[3].strip()}' for component {group_name}", header_line))
            declared_count = int(tokens[3])

        # format statement, e.g. (8i10)
        cursor.next_line()

        # No end marker: read records until a line that is not one, then step
        # back so that line is classified as the next block start
        n_values = 0
        ids: List[int] = []
        while True:
            cursor.mark()
            line = cursor.next_line()
            if line is None or not GROUP_RECORD_RE.match(line):
                cursor.rewind()
                break
            cursor.release()
            values = parse_signed_int_fields(line, cursor.line_num)[:GROUP_VALUES_PER_LINE]
            n_values += len(values)
            expand_node_ranges(values, ids, cursor.line_num)

        if entity and entity != "NODE":
            logger.info(format_message(f"Skipping {entity} component {group_name}", header_line))
            return

        if declared_count is not None and declared_count != n_values:
            session.add_warning(
                f"Component {group_name} declares {declared_count} entries, found {n_values}", header_line)

        group_id = session.group_id
        registry = self.mesh.get_group_registry()
        for node in ids:
            registry.add_node(session.resolve_node(node, header_line), group_id)
        registry.set_group_name(group_id, group_name)
        session.group_names[group_id] = group_name
        session.group_id += 1
        logger.debug(f"Line {header_line}: node group '{group_name}' with {len(ids)} nodes")

    def validate_mesh(self) -> Dict[str, bool]:
        """Validate the consistency of the mesh that was read"""
        results = {}
        results['read_completed'] = self.mesh.is_valid
        results['all_element_slots_filled'] = all(
            node is not None for elem in self.mesh.elements for node in elem.nodes)
        results['node_references_valid'] = all(
            self.mesh.node_exists(node) for elem in self.mesh.elements for node in elem.nodes if node is not None)
        results['all_partitions_named'] = all(
            self.mesh.partition_name(pid) for pid in {elem.partition_id for elem in self.mesh.elements})
        return results

    def get_parse_summary(self) -> Dict[str, object]:
        """Get summary of parsing results"""
        summary = self.session.summary() if self.session else {}
        summary['source'] = self.source_name
        summary['mesh'] = self.mesh.get_mesh_info()
        summary['validation'] = self.validate_mesh()
        return summary

    def print_concise_report(self) -> None:
        """Print a concise report of the mesh that was read"""
        info = self.mesh.get_mesh_info()
        registry = self.mesh.get_group_registry()

        print("\n" + "="*75)
        print("ANSYS CDB MESH REPORT: " + self.source_name)
        print("="*75)

        print(f"\nMESH PROPERTIES:")
        print(f"  • Nodes:          {info['num_nodes']:>12,}")
        print(f"  • Elements:       {info['num_elements']:>12,}")
        for type_name in sorted(info['element_types']):
            print(f"      {type_name:12s}  {info['element_types'][type_name]:>12,}")

        print(f"\nPARTITIONS ({len(info['partitions'])}):")
        for pid, partition in info['partitions'].items():
            print(f"  • {pid:4d}  {partition['name']:30s} {partition['element_count']:>10,}")

        print(f"\nNODE GROUPS ({len(registry)}):")
        for gid, group in info['groups'].items():
            print(f"  • {gid:4d}  {group['name']:30s} {group['node_count']:>10,}")

        consistency = self.validate_mesh()
        status_str = "✓ VALID" if all(consistency.values()) else "✗ INVALID"
        print(f"\nVALIDATION: {status_str}")

        print("\n" + "="*75 + "\n")

    def print_parse_issues(self) -> None:
        """Print parsing warnings"""
        if not self.session or not self.session.parse_warnings:
            return

        print("\n" + "="*60)
        print("PARSING ISSUES")
        print("="*60)
        print(f"\nWARNINGS ({len(self.session.parse_warnings)}):")
        for i, warning in enumerate(self.session.parse_warnings, 1):
            print(f"  {i:2d}. {warning}")
        print("\n" + "="*60 + "\n")

    def export_stats(self, filepath: str) -> None:
        """Export mesh statistics to JSON file"""
        with open(filepath, 'w') as f:
            json.dump(self.get_parse_summary(), f, indent=2)
        print(f"Statistics exported to {filepath}")


def read_cdb(source: Union[str, Path, Iterable[str]], mesh: Optional[Mesh] = None, **options) -> Mesh:
    """Read a CDB file into a new (or the given) mesh and return it"""
    if mesh is None:
        mesh = Mesh()
    CDBReader(mesh, **options).read(source)
    return mesh


def main():
    """Main entry point"""
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    cdb_file = sys.argv[1]

    # Parse arguments
    verbose = '--verbose' in sys.argv
    show_issues = '--show-issues' in sys.argv or verbose
    duplicate_nodes = "overwrite" if '--allow-duplicate-nodes' in sys.argv else "error"
    export_stats_arg = None
    if '--export-stats' in sys.argv:
        idx = sys.argv.index('--export-stats')
        if idx + 1 < len(sys.argv):
            export_stats_arg = sys.argv[idx + 1]

    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING,
                        format="%(levelname)s: %(message)s")

    if not Path(cdb_file).exists():
        print(f"❌ Error: File not found: {cdb_file}")
        sys.exit(1)

    mesh = Mesh()
    reader = CDBReader(mesh, duplicate_nodes=duplicate_nodes)

    try:
        # warnings are listed by print_parse_issues()
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ParseWarning)
            reader.read(cdb_file)
    except StreamUnreadableError as e:
        print(f"\n❌ Cannot read file: {e}")
        sys.exit(3)
    except ParseError as e:
        print(f"\n❌ Parse error: {e}")
        if show_issues:
            reader.print_parse_issues()
        sys.exit(2)
    except KeyboardInterrupt:
        print(f"\n⏹️  Reading interrupted by user")
        sys.exit(130)

    if show_issues:
        reader.print_parse_issues()

    reader.print_concise_report()

    if export_stats_arg:
        reader.export_stats(export_stats_arg)

    sys.exit(0)


if __name__ == '__main__':
    main()
