from __future__ import annotations

import pytest

from doccov.extract import extract, find_package_root


def test_extracts_documented_function(project_builder) -> None:
    project_builder.package_json(name="math-kit", version="2.1.0", description="Tiny math helpers")
    project_builder.write(
        {
            "src/index.ts": """
            /**
             * Adds two numbers.
             * @param a - First operand
             * @param b - Second operand
             * @returns The sum
             * @example
             * add(1, 2) // => 3
             */
            export function add(a: number, b: number = 0): number {
              return a + b;
            }
            """,
        }
    )

    result = project_builder.extract()
    spec = result.spec

    assert spec.meta.name == "math-kit"
    assert spec.meta.version == "2.1.0"
    assert spec.meta.description == "Tiny math helpers"
    assert [entry.name for entry in spec.exports] == ["add"]
    add = spec.exports[0]
    assert add.kind == "function"
    assert add.description == "Adds two numbers."
    assert add.examples == ["add(1, 2) // => 3"]
    assert add.source is not None and add.source.file == "src/index.ts"
    signature = add.signatures[0]
    assert [p.name for p in signature.parameters] == ["a", "b"]
    assert signature.parameters[0].schema == {"type": "number"}
    assert signature.parameters[0].description == "First operand"
    assert signature.parameters[1].required is False
    assert signature.parameters[1].default == "0"
    assert signature.returns is not None
    assert signature.returns.schema == {"type": "number"}
    assert signature.returns.description == "The sum"
    assert result.diagnostics == []


def test_class_members_and_visibility(project_builder) -> None:
    project_builder.package_json()
    project_builder.write(
        {
            "src/index.ts": """
            /** A counter. */
            export class Counter {
              static created = 0;
              private secret = 1;
              constructor(public readonly start: number) {}
              /** Increment by one. */
              increment(): void {}
              get value(): number { return 0; }
            }
            """,
        }
    )

    spec = project_builder.extract().spec
    counter = spec.exports[0]
    members = {member.name: member for member in counter.members}

    assert counter.kind == "class"
    assert members["created"].static is True
    assert members["secret"].visibility == "private"
    assert members["constructor"].kind == "constructor"
    assert members["start"].readonly is True
    assert members["increment"].description == "Increment by one."
    assert members["value"].kind == "accessor"
    assert [p.name for p in counter.signatures[0].parameters] == ["start"]


def test_interface_enum_and_type_alias(project_builder) -> None:
    project_builder.package_json()
    project_builder.write(
        {
            "src/index.ts": """
            export interface User {
              /** Display name. */
              name: string;
              age?: number;
            }
            export enum Color { Red, Green, Blue }
            export type Mode = "light" | "dark";
            export function load(id: string): User {
              return { name: id };
            }
            """,
        }
    )

    spec = project_builder.extract().spec
    by_name = {entry.name: entry for entry in spec.exports}

    assert by_name["User"].kind == "interface"
    assert by_name["User"].schema == {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Display name."},
            "age": {"type": "number"},
        },
        "required": ["name"],
    }
    assert by_name["Color"].schema == {"type": "number", "enum": [0, 1, 2]}
    assert by_name["Mode"].schema == {"type": "string", "enum": ["light", "dark"]}
    returns = by_name["load"].signatures[0].returns
    assert returns is not None and returns.schema == {"$ref": "#/types/User"}
    assert "User" in {item.id for item in spec.types}


def test_follows_reexports_across_files(project_builder) -> None:
    project_builder.package_json()
    project_builder.write(
        {
            "src/index.ts": """
            export { greet as hello } from "./greet";
            export * from "./util";
            """,
            "src/greet.ts": """
            /** Says hello. */
            export function greet(name: string): string {
              return `hi ${name}`;
            }
            """,
            "src/util.ts": """
            export const VERSION = "1.0.0";
            """,
        }
    )

    result = project_builder.extract()
    by_name = {entry.name: entry for entry in result.spec.exports}

    assert set(by_name) == {"hello", "VERSION"}
    assert by_name["hello"].description == "Says hello."
    assert by_name["hello"].source is not None
    assert by_name["hello"].source.file == "src/greet.ts"
    assert by_name["VERSION"].kind == "variable"
    assert by_name["VERSION"].flags.get("const") is True
    assert sorted(path.name for path in result.source_files) == ["greet.ts", "index.ts", "util.ts"]


def test_unresolved_external_export_becomes_diagnostic(project_builder) -> None:
    project_builder.package_json()
    project_builder.write({"src/index.ts": 'export { thing } from "some-lib";\n'})

    result = project_builder.extract()

    assert result.spec.exports == []
    assert any("thing" in diagnostic.message for diagnostic in result.diagnostics)


def test_syntax_error_reported_as_diagnostic(project_builder) -> None:
    project_builder.package_json()
    project_builder.write(
        {
            "src/index.ts": """
            export function ok(): void {}
            export function broken( {
            """,
        }
    )

    result = project_builder.extract()

    assert any(d.message.startswith("Syntax error in src/index.ts") for d in result.diagnostics)


def test_missing_entry_raises(project_builder) -> None:
    with pytest.raises(FileNotFoundError):
        project_builder.extract("src/missing.ts")


def test_extraction_is_deterministic(project_builder) -> None:
    project_builder.package_json()
    project_builder.write(
        {
            "src/index.ts": """
            export interface Node { children: Node[] }
            export function walk(node: Node): Node[] { return node.children; }
            """,
        }
    )

    first = project_builder.extract().spec.to_dict()
    second = project_builder.extract().spec.to_dict()

    assert first == second
    node_type = next(item for item in first["types"] if item["id"] == "Node")
    assert node_type["schema"]["properties"]["children"] == {
        "type": "array",
        "items": {"$ref": "#/types/Node"},
    }


def test_find_package_root_prefers_manifest(project_builder) -> None:
    project_builder.package_json()
    project_builder.write({"src/deep/index.ts": "export const x = 1;\n"})

    assert find_package_root(project_builder.path("src/deep/index.ts")) == project_builder.path()


def test_max_depth_zero_still_extracts(project_builder) -> None:
    project_builder.package_json()
    project_builder.write({"src/index.ts": "export function id(value: string): string { return value; }\n"})

    result = extract(project_builder.path("src/index.ts"), max_depth=0)

    assert result.spec.exports[0].signatures[0].parameters[0].schema == {"type": "string"}


def test_serialization_failure_is_isolated_to_one_export(project_builder, monkeypatch) -> None:
    from doccov.extract.serializers import ExportSerializer

    project_builder.package_json()
    project_builder.write(
        {
            "src/index.ts": """
            export function ok(): number { return 1; }
            export function broken(): number { return 2; }
            export const label = "x";
            """,
        }
    )
    original = ExportSerializer.serialize

    def failing(self, name, resolved, **kwargs):
        if name == "broken":
            raise ValueError("unsupported construct")
        return original(self, name, resolved, **kwargs)

    monkeypatch.setattr(ExportSerializer, "serialize", failing)

    result = project_builder.extract()

    assert [entry.name for entry in result.spec.exports] == ["ok", "label"]
    errors = [d for d in result.diagnostics if d.severity == "error"]
    assert len(errors) == 1
    assert errors[0].message == "Failed to serialize export 'broken': unsupported construct"
    assert errors[0].file == "src/index.ts"
    assert errors[0].line == 2
    assert errors[0].column is not None
