from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from pgstruct.codegen.keymap import KeyMapConfig
from pgstruct.codegen.main import GeneratorContext, build_types, generate, main
from pgstruct.codegen.renderer import JinjaTemplate
from pgstruct.shared.errors import FieldResolutionError, QueryError

USER_ACCOUNT_COLUMNS = [
    (1, "id", "integer", True, "nextval('user_account_id_seq'::regclass)", True),
    (2, "email", "text", True, "", False),
    (3, "nickname", "text", False, "", False),
]
T3_COLUMNS = [
    (1, "id", "integer", True, "", True),
    (2, "i", "integer", True, "", True),
]


def _connection(*results):
    conn = MagicMock()
    cursor = conn.cursor.return_value.__enter__.return_value
    cursor.fetchall.side_effect = list(results)
    return conn


def _schema_connection():
    return _connection(
        [("r", "user_account"), ("r", "t3")],
        USER_ACCOUNT_COLUMNS,
        T3_COLUMNS,
    )


class TestGeneratorContext:
    def test_defaults(self):
        ctx = GeneratorContext()

        assert ctx.type_map.default.name == "default"
        assert ctx.key_map.default is True
        assert ctx.header is not None

    def test_contexts_are_independent(self):
        first = GeneratorContext()
        second = GeneratorContext()
        first.header = None

        assert second.header is not None


class TestBuildTypes:
    def test_build_types(self):
        ctx = GeneratorContext(key_map=KeyMapConfig(entries=(("t3", False),), default=True))

        structs = build_types(_schema_connection(), "public", ctx)

        assert [s.name for s in structs] == ["UserAccount", "T3"]
        assert structs[0].auto_generated_key is True
        assert structs[1].auto_generated_key is False
        assert [f.name for f in structs[1].primary_key_fields] == ["id", "i"]

    def test_field_error_aborts(self):
        conn = _connection([("r", "users")], [(1, "%%", "text", True, "", False)])

        with pytest.raises(FieldResolutionError):
            build_types(conn, "public", GeneratorContext())


class TestGenerate:
    def test_generate_in_catalog_order(self):
        ctx = GeneratorContext(
            template=JinjaTemplate("{{ struct.name }}\n"),
            header=None,
            formatter=lambda source: source,
        )

        output = generate(_schema_connection(), "public", ctx)

        assert output == b"UserAccount\n\n\nT3\n"

    def test_generate_full_output(self):
        output = generate(_schema_connection(), "public").decode("utf-8")

        assert output.startswith("# Code generated by pgstruct. DO NOT EDIT.\n")
        assert output.index("class UserAccount:") < output.index("class T3:")
        assert "INSERT INTO public.t3 DEFAULT VALUES RETURNING id, i" in output

    def test_generate_exclude(self):
        conn = _connection([("r", "user_account"), ("r", "t3")], T3_COLUMNS)
        ctx = GeneratorContext(
            template=JinjaTemplate("{{ struct.name }}\n"),
            header=None,
            formatter=lambda source: source,
        )

        assert generate(conn, "public", ctx, exclude=["user_account"]) == b"T3\n"

    def test_generate_no_tables(self):
        ctx = GeneratorContext(header=None)

        assert generate(_connection([]), "empty", ctx) == b""

    def test_generate_query_error(self):
        conn = _connection()
        conn.cursor.return_value.__enter__.return_value.execute.side_effect = (
            psycopg2.OperationalError("server closed the connection")
        )

        with pytest.raises(QueryError, match="server closed the connection"):
            generate(conn, "public")


class TestMain:
    @patch("pgstruct.codegen.main.psycopg2.connect")
    def test_main_writes_output_file(self, mock_connect, tmp_path, capsys):
        conn = _schema_connection()
        mock_connect.return_value = conn
        output = tmp_path / "out" / "models.py"

        main(["postgres://localhost/app", "-o", str(output)])

        mock_connect.assert_called_once_with("postgres://localhost/app")
        conn.set_session.assert_called_once_with(readonly=True)
        conn.close.assert_called_once()
        assert "class UserAccount:" in output.read_text()
        captured = capsys.readouterr()
        assert "Generated 2 type(s) from schema 'public'" in captured.out

    @patch("pgstruct.codegen.main.psycopg2.connect")
    def test_main_stdout(self, mock_connect, capsys):
        mock_connect.return_value = _schema_connection()

        main(["postgres://localhost/app", "--no-header"])

        captured = capsys.readouterr()
        assert captured.out.startswith("# UserAccount represents public.user_account")

    @patch("pgstruct.codegen.main.psycopg2.connect")
    def test_main_custom_configs(self, mock_connect, tmp_path, capsys):
        mock_connect.return_value = _connection(
            [("r", "t3")],
            T3_COLUMNS,
        )
        typemap = tmp_path / "typemap.toml"
        typemap.write_text(
            '[default]\n'
            'db_types = []\n'
            'notnull_type = "object"\n'
            'notnull_nil_value = "None"\n'
            'nullable_type = "object"\n'
            'nullable_nil_value = "None"\n'
        )
        keymap = tmp_path / "keymap.yaml"
        keymap.write_text("t3: false\n")
        template = tmp_path / "fields.j2"
        template.write_text(
            "{% for f in struct.fields %}{{ f.name }}: {{ f.type }}\n{% endfor %}"
            "AUTO = {{ struct.auto_generated_key }}\n"
        )

        main([
            "postgres://localhost/app",
            "--schema", "sales",
            "--typemap", str(typemap),
            "--keymap", str(keymap),
            "--template", str(template),
            "--no-header",
        ])

        captured = capsys.readouterr()
        assert captured.out == "id: object\ni: object\nAUTO = False\n"

    @patch("pgstruct.codegen.main.psycopg2.connect")
    def test_main_closes_connection_on_error(self, mock_connect, tmp_path):
        conn = _connection()
        conn.cursor.return_value.__enter__.return_value.execute.side_effect = (
            psycopg2.OperationalError("boom")
        )
        mock_connect.return_value = conn
        output = tmp_path / "models.py"

        with pytest.raises(SystemExit) as exc_info:
            main(["postgres://localhost/app", "-o", str(output)])

        assert "Error:" in str(exc_info.value)
        conn.close.assert_called_once()
        assert not output.exists()

    @patch("pgstruct.codegen.main.psycopg2.connect")
    def test_main_connect_failure(self, mock_connect):
        mock_connect.side_effect = psycopg2.OperationalError("could not connect")

        with pytest.raises(SystemExit) as exc_info:
            main(["postgres://localhost/app"])
        assert "could not connect" in str(exc_info.value)

    def test_main_invalid_typemap(self, tmp_path):
        typemap = tmp_path / "typemap.yaml"
        typemap.write_text("string:\n  db_types: [text]\n")

        with patch("pgstruct.codegen.main.psycopg2.connect") as mock_connect:
            with pytest.raises(SystemExit) as exc_info:
                main(["postgres://localhost/app", "--typemap", str(typemap)])
        assert "Error:" in str(exc_info.value)
        mock_connect.assert_not_called()

    def test_main_no_dsn(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert "no database given" in str(exc_info.value)

    @patch("pgstruct.codegen.main.build_types")
    @patch("pgstruct.codegen.main.psycopg2.connect")
    def test_main_exclude(self, mock_connect, mock_build_types, capsys):
        mock_build_types.return_value = []

        main(["postgres://localhost/app", "-x", "audit_log", "-x", "sessions"])

        args, _ = mock_build_types.call_args
        assert args[1] == "public"
        assert args[3] == ["audit_log", "sessions"]
        mock_connect.return_value.close.assert_called_once()
