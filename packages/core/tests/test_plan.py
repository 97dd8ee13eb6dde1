"""Tests for reading plan output and detecting changes."""

import json

import pytest

from plancomment_core.errors import FormatError, ReadError
from plancomment_core.plan import NO_CHANGES_TEXT, PlanResult, parse_plan_json, parse_plan_text, read_plan

TEXT_PLAN = """\
Initializing the backend...
Initializing provider plugins...

Terraform used the selected providers to generate the following execution
plan. Resource actions are indicated with the following symbols:
  + create
  ~ update in-place

Terraform will perform the following actions:

  # aws_instance.web will be created
  + resource "aws_instance" "web" {
      + ami = "ami-123"
    }

Plan: 1 to add, 0 to change, 0 to destroy.
"""

NO_CHANGES_PLAN = """\
No changes. Your infrastructure matches the configuration.

Terraform has compared your real infrastructure against your configuration
and found no differences, so no changes are needed.
"""


def _json_plan(*actions_list):
    return {
        "format_version": "1.2",
        "resource_changes": [
            {"address": f"null_resource.r{i}", "change": {"actions": list(actions)}}
            for i, actions in enumerate(actions_list)
        ],
    }


class TestParsePlanText:
    def test_single_diff_line_has_changes(self):
        result = parse_plan_text("~ update resource X")
        assert result == PlanResult(raw_markdown="~ update resource X", has_changes=True)

    def test_no_changes_text(self):
        assert parse_plan_text("No changes.").has_changes is False

    def test_terraform_no_changes_output(self):
        assert parse_plan_text(NO_CHANGES_PLAN).has_changes is False

    def test_full_plan_has_changes(self):
        assert parse_plan_text(TEXT_PLAN).has_changes is True

    def test_init_noise_dropped(self):
        result = parse_plan_text(TEXT_PLAN)
        assert result.raw_markdown.startswith("Terraform used the selected providers")
        assert "Initializing" not in result.raw_markdown

    def test_zero_count_summary_means_no_changes(self):
        text = "~ something drifted\n\nPlan: 0 to add, 0 to change, 0 to destroy."
        assert parse_plan_text(text).has_changes is False

    def test_destroy_count_counts(self):
        assert parse_plan_text("Plan: 0 to add, 0 to change, 2 to destroy.").has_changes is True

    @pytest.mark.parametrize(
        "line",
        [
            "  # aws_s3_bucket.logs will be updated in-place",
            "  # aws_s3_bucket.logs will be destroyed",
            "  # aws_db_instance.main must be replaced",
            "  # module.net.aws_vpc.this will be replaced",
        ],
    )
    def test_resource_headers_detected(self, line):
        assert parse_plan_text(line).has_changes is True

    def test_drift_section_before_no_changes_is_not_a_change(self):
        text = (
            "Note: Objects have changed outside of Terraform\n\n"
            "  # aws_instance.web has changed\n"
            "  ~ resource \"aws_instance\" \"web\" {\n"
            "    }\n\n"
            "No changes. Your infrastructure matches the configuration."
        )
        assert parse_plan_text(text).has_changes is False

    def test_output_only_changes_are_not_resource_actions(self):
        text = "Changes to Outputs:\n  + url = \"https://example.com\""
        assert parse_plan_text(text).has_changes is False

    def test_empty_text(self):
        assert parse_plan_text("") == PlanResult(raw_markdown="", has_changes=False)

    def test_markdown_dash_without_space_is_not_an_action(self):
        assert parse_plan_text("---\nsome text").has_changes is False


class TestParsePlanJson:
    def test_no_resource_changes(self):
        result = parse_plan_json({"format_version": "1.2"})
        assert result == PlanResult(raw_markdown=NO_CHANGES_TEXT, has_changes=False)

    def test_noop_and_read_are_not_changes(self):
        result = parse_plan_json(_json_plan(["no-op"], ["read"]))
        assert result.has_changes is False

    def test_create_update_delete_rendered(self):
        result = parse_plan_json(_json_plan(["create"], ["update"], ["delete"]))
        assert result.has_changes is True
        lines = result.raw_markdown.splitlines()
        assert lines[0] == "+ null_resource.r0 (create)"
        assert lines[1] == "~ null_resource.r1 (update)"
        assert lines[2] == "- null_resource.r2 (delete)"
        assert lines[-1] == "Plan: 1 to add, 1 to change, 1 to destroy."

    def test_replace_counts_as_add_and_destroy(self):
        result = parse_plan_json(_json_plan(["delete", "create"]))
        assert "-/+ null_resource.r0 (replace)" in result.raw_markdown
        assert result.raw_markdown.endswith("Plan: 1 to add, 0 to change, 1 to destroy.")

    def test_create_before_destroy_replace(self):
        result = parse_plan_json(_json_plan(["create", "delete"]))
        assert "+/- null_resource.r0 (replace)" in result.raw_markdown

    def test_not_a_plan_raises(self):
        with pytest.raises(FormatError):
            parse_plan_json({"hello": "world"})

    def test_list_document_raises(self):
        with pytest.raises(FormatError):
            parse_plan_json([1, 2, 3])

    def test_resource_changes_not_a_list_raises(self):
        with pytest.raises(FormatError):
            parse_plan_json({"format_version": "1.2", "resource_changes": {"a": 1}})

    @pytest.mark.parametrize(
        "entry",
        [
            {"address": "null_resource.a", "change": "create"},
            {"address": "null_resource.a", "change": {"actions": 5}},
            {"address": "null_resource.a", "change": {"actions": [["create"]]}},
        ],
    )
    def test_malformed_change_raises(self, entry):
        with pytest.raises(FormatError) as exc:
            parse_plan_json({"format_version": "1.2", "resource_changes": [entry]})
        assert "null_resource.a" in str(exc.value)


class TestReadPlan:
    def test_missing_file_raises_read_error(self, tmp_path):
        with pytest.raises(ReadError) as exc:
            read_plan(tmp_path / "missing.txt")
        assert "missing.txt" in str(exc.value)

    def test_directory_raises_read_error(self, tmp_path):
        with pytest.raises(ReadError):
            read_plan(tmp_path)

    def test_reads_text_plan(self, tmp_path):
        path = tmp_path / "plan.txt"
        path.write_text(TEXT_PLAN)
        result = read_plan(path)
        assert result.has_changes is True
        assert "aws_instance.web" in result.raw_markdown

    def test_strips_ansi_colours(self, tmp_path):
        path = tmp_path / "plan.txt"
        path.write_text("\x1b[32m+\x1b[0m create thing\n\x1b[1mPlan:\x1b[0m 1 to add, 0 to change, 0 to destroy.")
        result = read_plan(path)
        assert "\x1b" not in result.raw_markdown
        assert result.has_changes is True

    def test_reads_json_plan(self, tmp_path):
        path = tmp_path / "plan.json"
        path.write_text(json.dumps(_json_plan(["create"])))
        assert read_plan(path).has_changes is True

    def test_reads_json_plan_with_byte_order_mark(self, tmp_path):
        path = tmp_path / "plan.json"
        path.write_bytes(b"\xef\xbb\xbf" + json.dumps(_json_plan(["create"])).encode())
        result = read_plan(path)
        assert result.has_changes is True
        assert result.raw_markdown.startswith("+ null_resource.r0 (create)")

    def test_invalid_json_raises_format_error(self, tmp_path):
        path = tmp_path / "plan.json"
        path.write_text('{"format_version": ')
        with pytest.raises(FormatError):
            read_plan(path)

    def test_binary_plan_raises_format_error(self, tmp_path):
        path = tmp_path / "tfplan"
        path.write_bytes(b"PK\x03\x04\x14\x00\x00\x00binary")
        with pytest.raises(FormatError) as exc:
            read_plan(path)
        assert "terraform show" in str(exc.value)

    def test_non_utf8_raises_format_error(self, tmp_path):
        path = tmp_path / "plan.txt"
        path.write_bytes(b"\xff\xfe\xfa plan")
        with pytest.raises(FormatError):
            read_plan(path)
