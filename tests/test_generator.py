"""
tests/test_generator.py
Tests for layergen.generator: schema loading, per-artifact generation,
batch generation and the generation report.

Run with:
    pytest tests/ -v
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Dict, List

import pytest

from layergen.generator import (
    CodeGenerator,
    FileSchemaSource,
    GenerationReport,
    SchemaSource,
    load_schema_file,
    parse_raw_schema,
)
from layergen.models import (
    ConfigurationError,
    EntityRegistration,
    GenerateOptions,
    ResultShape,
    TableInfo,
)
from layergen.templates import TemplateStore

COMPANION_PATHS = (
    "IRepositories/IUserRepository.cs",
    "Repositories/UserRepository.cs",
    "IServices/IUserService.cs",
    "Services/UserService.cs",
    "Controllers/UserController.cs",
    "Controllers/UserApiController.cs",
)


def _files(root: pathlib.Path) -> List[str]:
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())


# ===========================================================================
# Schema loading
# ===========================================================================


class TestSchemaLoading:

    def test_load_yaml(self, minimal_schema_yaml_path: pathlib.Path) -> None:
        raw = load_schema_file(minimal_schema_yaml_path)
        assert raw["tables"][0]["name"] == "user"

    def test_load_json(
        self, minimal_schema_dict: Dict[str, Any], tmp_path: pathlib.Path
    ) -> None:
        path = tmp_path / "schema.json"
        path.write_text(json.dumps(minimal_schema_dict), encoding="utf-8")
        assert load_schema_file(path) == minimal_schema_dict

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_schema_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("tables: [unclosed", encoding="utf-8")
        with pytest.raises(ValueError):
            load_schema_file(path)

    def test_non_mapping_rejected(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError, match="JSON object"):
            load_schema_file(path)

    def test_parse_reference_schema(self, schema_dict: Dict[str, Any]) -> None:
        schema, options = parse_raw_schema(schema_dict)
        assert schema.table_names == ["user", "order_item", "audit_log"]
        assert schema.entities["Tenant"].key_type == "Guid"
        assert schema.view_models[0].name == "UserOrderSummary"
        assert options.is_pascal_case is True
        assert options.models_namespace == "Demo.Models"

    def test_parse_applies_overrides(self, schema_dict: Dict[str, Any]) -> None:
        _, options = parse_raw_schema(
            schema_dict, {"output_path": "/tmp/x", "is_pascal_case": False}
        )
        assert options.output_path == "/tmp/x"
        assert options.is_pascal_case is False
        assert options.controllers_namespace == "Demo.Controllers"

    def test_parse_nested_schema_key(self, user_table_dict: Dict[str, Any]) -> None:
        schema, options = parse_raw_schema({"schema": {"tables": [user_table_dict]}})
        assert schema.table_names == ["user"]
        assert options.output_path is None

    def test_parse_rejects_unknown_option(self) -> None:
        with pytest.raises(ValueError, match="Options validation failed"):
            parse_raw_schema({"options": {"Bogus": 1}})

    def test_parse_rejects_duplicate_tables(
        self, user_table_dict: Dict[str, Any]
    ) -> None:
        with pytest.raises(ValueError, match="Duplicate table names"):
            parse_raw_schema({"tables": [user_table_dict, user_table_dict]})


class TestFileSchemaSource:

    def test_get_tables(self, minimal_schema_yaml_path: pathlib.Path) -> None:
        source = FileSchemaSource(minimal_schema_yaml_path)
        assert isinstance(source, SchemaSource)
        tables = source.get_tables()
        assert [t.name for t in tables] == ["user"]


# ===========================================================================
# Construction
# ===========================================================================


class TestConstruction:

    def test_missing_output_path(self) -> None:
        with pytest.raises(ConfigurationError):
            CodeGenerator(GenerateOptions())

    def test_configuration_error_is_value_error(self) -> None:
        assert issubclass(ConfigurationError, ValueError)

    def test_custom_template_dir(
        self, output_dir: pathlib.Path, tmp_path: pathlib.Path
    ) -> None:
        tpl = tmp_path / "tpl"
        tpl.mkdir()
        (tpl / "IRepositoryTemplate.txt").write_text(
            "// {ModelTypeName}:{KeyTypeName}", encoding="utf-8"
        )
        gen = CodeGenerator(GenerateOptions(OutputPath=str(output_dir), TemplateDir=str(tpl)))
        gen.generate_irepository("User", "long")
        text = (output_dir / "IRepositories" / "IUserRepository.cs").read_text(encoding="utf-8")
        assert text == "// User:long"


# ===========================================================================
# Single artifacts
# ===========================================================================


class TestSingleArtifacts:

    def test_irepository(self, generator: CodeGenerator, output_dir: pathlib.Path) -> None:
        assert generator.generate_irepository("User", "int") is True
        text = (output_dir / "IRepositories" / "IUserRepository.cs").read_text(encoding="utf-8")
        assert "namespace Demo.IRepositories" in text
        assert "using Demo.Models;" in text
        assert "public interface IUserRepository : IRepository<User, int>" in text

    def test_repository(self, generator: CodeGenerator, output_dir: pathlib.Path) -> None:
        generator.generate_repository("User", "int")
        text = (output_dir / "Repositories" / "UserRepository.cs").read_text(encoding="utf-8")
        assert "namespace Demo.Repositories" in text
        assert "using Demo.IRepositories;" in text
        assert "BaseRepository<User, int>, IUserRepository" in text

    def test_iservice_and_service(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        generator.generate_iservice("User", "Guid")
        generator.generate_service("User", "Guid")
        iservice = (output_dir / "IServices" / "IUserService.cs").read_text(encoding="utf-8")
        service = (output_dir / "Services" / "UserService.cs").read_text(encoding="utf-8")
        assert "IService<User, Guid>" in iservice
        assert "namespace Demo.Services" in service
        assert "UserService(IUserRepository repository)" in service

    def test_controllers_are_distinct_files(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        generator.generate_controller("User", "int")
        generator.generate_api_controller("User", "int")
        mvc = (output_dir / "Controllers" / "UserController.cs").read_text(encoding="utf-8")
        api = (output_dir / "Controllers" / "UserApiController.cs").read_text(encoding="utf-8")
        assert "public class UserController : Controller" in mvc
        assert "public class UserApiController : ControllerBase" in api
        # route template braces are C# content, not tokens
        assert '[HttpGet("{id}")]' in api
        assert "Get(int id)" in api

    def test_existing_file_kept(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        target = output_dir / "Services" / "UserService.cs"
        target.parent.mkdir(parents=True)
        target.write_text("// hand edited", encoding="utf-8")
        assert generator.generate_service("User", "int") is False
        assert target.read_text(encoding="utf-8") == "// hand edited"
        assert generator.generate_service("User", "int", overwrite=True) is True
        assert "class UserService" in target.read_text(encoding="utf-8")

    def test_missing_template_writes_empty_file(self, output_dir: pathlib.Path) -> None:
        gen = CodeGenerator(
            GenerateOptions(OutputPath=str(output_dir)),
            templates=TemplateStore(output_dir / "no-templates"),
        )
        assert gen.generate_service("User", "int") is True
        assert (output_dir / "Services" / "UserService.cs").read_text(encoding="utf-8") == ""


class TestEntity:

    def test_user_entity(
        self, generator: CodeGenerator, user_table: TableInfo, output_dir: pathlib.Path
    ) -> None:
        assert generator.generate_entity(user_table) is True
        text = (output_dir / "Models" / "User.cs").read_text(encoding="utf-8")
        assert "namespace Demo.Models" in text
        assert "/// Application users" in text
        assert '[Table("user")]' in text
        assert "public class User : BaseModel<int>" in text
        assert "[DatabaseGenerated(DatabaseGeneratedOption.Identity)]" in text
        assert "public override int Id {get;set;}" in text
        assert '[Column("user_name")]' in text
        assert "[Required]" in text
        assert "[MaxLength(50)]" in text
        assert "public string UserName {get;set;}" in text

    def test_entity_without_pascal_case(
        self, user_table: TableInfo, output_dir: pathlib.Path
    ) -> None:
        gen = CodeGenerator(GenerateOptions(OutputPath=str(output_dir)))
        gen.generate_entity(user_table)
        text = (output_dir / "Models" / "user.cs").read_text(encoding="utf-8")
        assert "public class user : BaseModel<int>" in text
        assert "public string user_name {get;set;}" in text

    def test_entity_without_key_raises(
        self, generator: CodeGenerator, no_pk_table: TableInfo
    ) -> None:
        with pytest.raises(ValueError, match="no primary key"):
            generator.generate_entity(no_pk_table)

    def test_explicit_key_type(
        self, generator: CodeGenerator, no_pk_table: TableInfo, output_dir: pathlib.Path
    ) -> None:
        generator.generate_entity(no_pk_table, key_type_name="long")
        text = (output_dir / "Models" / "AuditLog.cs").read_text(encoding="utf-8")
        assert "BaseModel<long>" in text
        assert "public DateTime? LoggedAt {get;set;}" in text


# ===========================================================================
# Batch generation
# ===========================================================================


class TestGenerateSingle:

    def test_six_companions(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        report = generator.generate_single("User", "int")
        assert report.files_written == 6
        assert report.files_skipped == 0
        assert report.success
        assert _files(output_dir) == sorted(COMPANION_PATHS)

    def test_rerun_is_non_destructive(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        generator.generate_single("User", "int")
        before = {p: (output_dir / p).stat().st_mtime_ns for p in COMPANION_PATHS}
        report = generator.generate_single("User", "int")
        assert report.files_written == 0
        assert report.files_skipped == 6
        after = {p: (output_dir / p).stat().st_mtime_ns for p in COMPANION_PATHS}
        assert before == after

    def test_write_failure_isolated(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        # a directory in place of the service file makes that one write fail
        (output_dir / "Services" / "UserService.cs").mkdir(parents=True)
        report = generator.generate_single("User", "int", overwrite=True)
        assert not report.success
        assert len(report.errors) == 1
        assert "service" in report.errors[0]
        assert report.files_written == 5


class TestGenerate:

    def test_end_to_end_user(
        self, generator: CodeGenerator, user_table: TableInfo, output_dir: pathlib.Path
    ) -> None:
        report = generator.generate([user_table])
        assert report.tables_processed == 1
        assert report.files_written == 7
        assert _files(output_dir) == sorted(("Models/User.cs",) + COMPANION_PATHS)
        entity = (output_dir / "Models" / "User.cs").read_text(encoding="utf-8")
        assert "public override int Id {get;set;}" in entity
        assert "public string UserName {get;set;}" in entity
        assert report.total_bytes > 0
        assert len(report.written_paths) == 7

    def test_table_without_key_skipped(
        self,
        generator: CodeGenerator,
        user_table: TableInfo,
        no_pk_table: TableInfo,
        output_dir: pathlib.Path,
    ) -> None:
        report = generator.generate([no_pk_table, user_table])
        assert report.skipped_tables == ["audit_log"]
        assert report.tables_processed == 1
        assert report.success
        assert not any("AuditLog" in f for f in _files(output_dir))

    def test_only_tables_without_key(
        self, generator: CodeGenerator, no_pk_table: TableInfo, output_dir: pathlib.Path
    ) -> None:
        report = generator.generate([no_pk_table])
        assert report.files_written == 0
        assert _files(output_dir) == []

    def test_selector(
        self, generator: CodeGenerator, schema_dict: Dict[str, Any], output_dir: pathlib.Path
    ) -> None:
        schema, _ = parse_raw_schema(schema_dict)
        report = generator.generate(schema.tables, selector=lambda t: t.name == "order_item")
        assert report.tables_processed == 1
        assert report.skipped_tables == []
        assert (output_dir / "Models" / "OrderItem.cs").exists()
        assert not (output_dir / "Models" / "User.cs").exists()

    def test_composite_key_uses_first_column(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        table = TableInfo.model_validate(
            {
                "name": "user_role",
                "columns": [
                    {"name": "user_id", "type": "long", "primary_key": True, "nullable": False},
                    {"name": "role_id", "type": "int", "primary_key": True, "nullable": False},
                ],
            }
        )
        generator.generate([table])
        irepo = (output_dir / "IRepositories" / "IUserRoleRepository.cs").read_text(encoding="utf-8")
        assert "IRepository<UserRole, long>" in irepo

    def test_overwrite_replaces_entity(
        self, generator: CodeGenerator, user_table: TableInfo, output_dir: pathlib.Path
    ) -> None:
        generator.generate([user_table])
        target = output_dir / "Models" / "User.cs"
        target.write_text("// stale", encoding="utf-8")
        report = generator.generate([user_table], overwrite=True)
        assert report.files_written == 7
        assert "class User" in target.read_text(encoding="utf-8")


class TestGenerateFromSource:

    def test_no_source_raises(self, generator: CodeGenerator) -> None:
        with pytest.raises(ConfigurationError):
            generator.generate_from_source()

    def test_registered_source(
        self, options: GenerateOptions, minimal_schema_yaml_path: pathlib.Path,
        output_dir: pathlib.Path,
    ) -> None:
        gen = CodeGenerator(options, schema_source=FileSchemaSource(minimal_schema_yaml_path))
        report = gen.generate_from_source()
        assert report.tables_processed == 1
        assert (output_dir / "Models" / "User.cs").exists()

    def test_source_argument(
        self, generator: CodeGenerator, user_table: TableInfo, output_dir: pathlib.Path
    ) -> None:
        class _Static:
            def get_tables(self) -> List[TableInfo]:
                return [user_table]

        report = generator.generate_from_source(_Static())
        assert report.files_written == 7


class TestGenerateRegistered:

    def test_companions_only(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        report = generator.generate_registered({"User": EntityRegistration(key_type="int")})
        assert report.files_written == 6
        assert _files(output_dir) == sorted(COMPANION_PATHS)

    def test_with_columns_emits_entity(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        registry = {
            "Tenant": EntityRegistration.model_validate(
                {
                    "key_type": "Guid",
                    "columns": [{"name": "display_name", "type": "string", "max_length": 80}],
                }
            )
        }
        report = generator.generate_registered(registry)
        assert report.files_written == 7
        entity = (output_dir / "Models" / "Tenant.cs").read_text(encoding="utf-8")
        assert "BaseModel<Guid>" in entity
        assert "[MaxLength(80)]" in entity


# ===========================================================================
# View models
# ===========================================================================


class TestViewModels:

    def test_single_view_model(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        shape = ResultShape.from_rows(
            "order_summary", [{"order_count": 3, "total": 9.5, "name": None}]
        )
        assert generator.generate_view_model(shape, "OrderSummaryVm") is True
        text = (output_dir / "ViewModels" / "OrderSummaryVm.cs").read_text(encoding="utf-8")
        assert "namespace Demo.ViewModels" in text
        assert "public class OrderSummaryVm" in text
        assert "'order_summary'" in text
        assert "public Int32 OrderCount{ get; set; }" in text
        assert "public Double Total{ get; set; }" in text
        assert "public Object Name{ get; set; }" in text

    def test_single_view_model_overwrites_by_default(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        target = output_dir / "ViewModels" / "Summary.cs"
        target.parent.mkdir(parents=True)
        target.write_text("old", encoding="utf-8")
        generator.generate_view_model(ResultShape(name="summary"), "Summary")
        assert target.read_text(encoding="utf-8") != "old"

    def test_file_named_after_class_name(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        generator.generate_view_model(ResultShape(name="order_summary"), "SummaryVm")
        generator.generate_view_model(ResultShape(name="user_stats"))
        assert _files(output_dir) == [
            "ViewModels/SummaryVm.cs",
            "ViewModels/UserStats.cs",
        ]

    def test_none_shape_rejected(self, generator: CodeGenerator) -> None:
        with pytest.raises(ValueError):
            generator.generate_view_model(None)

    def test_batch_keeps_existing(
        self, generator: CodeGenerator, output_dir: pathlib.Path
    ) -> None:
        shapes = [ResultShape(name="A"), ResultShape(name="B")]
        first = generator.generate_view_models(shapes)
        second = generator.generate_view_models(shapes)
        assert first.files_written == 2
        assert second.files_written == 0
        assert second.files_skipped == 2


# ===========================================================================
# Full schema + report
# ===========================================================================


class TestGenerateSchema:

    def test_reference_schema(
        self, generator: CodeGenerator, schema_dict: Dict[str, Any], output_dir: pathlib.Path
    ) -> None:
        schema, _ = parse_raw_schema(schema_dict)
        report = generator.generate_schema(schema)
        files = _files(output_dir)
        assert "Models/User.cs" in files
        assert "Models/OrderItem.cs" in files
        assert "IRepositories/ITenantRepository.cs" in files
        assert "ViewModels/UserOrderSummary.cs" in files
        assert report.skipped_tables == ["audit_log"]
        # 2 tables x 7 + Tenant companions + one view model
        assert report.files_written == 14 + 6 + 1

    def test_without_view_models(
        self, generator: CodeGenerator, schema_dict: Dict[str, Any], output_dir: pathlib.Path
    ) -> None:
        schema, _ = parse_raw_schema(schema_dict)
        generator.generate_schema(schema, include_view_models=False)
        assert not (output_dir / "ViewModels").exists()


class TestGenerationReport:

    def test_summary_mentions_counts(self) -> None:
        report = GenerationReport(output_directory="/out", files_written=3)
        report.skipped_tables.append("audit_log")
        text = report.summary()
        assert "SUCCESS" in text
        assert "audit_log" in text
        assert "/out" in text

    def test_errors_mark_failure(self) -> None:
        report = GenerationReport()
        report.errors.append("boom")
        assert not report.success
        assert "FAILED" in report.summary()

    def test_merge(self) -> None:
        a = GenerationReport(files_written=1, tables_processed=1)
        b = GenerationReport(files_written=2, files_skipped=1)
        b.errors.append("x")
        a.merge(b)
        assert a.files_written == 3
        assert a.files_skipped == 1
        assert a.errors == ["x"]
