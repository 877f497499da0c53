"""Unit tests for sidecar metadata reading, joining and flattening."""

from __future__ import annotations

import json
from pathlib import Path

from src.models.document import Document, MetadataEntry
from src.services.ingestion.metadata import attach_metadata, flatten_metadata, read_metadata


def _write_sidecar(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _page(source: str, text: str = "Page text", page_number: int = 1) -> Document:
    return Document(
        page_content=text,
        metadata={
            "source": source,
            "pdf": {"version": "PDF 1.7", "info": {}, "totalPages": 3},
            "loc": {"pageNumber": page_number},
        },
    )


# ======================================================================
# read_metadata
# ======================================================================


class TestReadMetadata:
    def test_reads_documents(self, tmp_path: Path) -> None:
        sidecar = _write_sidecar(
            tmp_path / "db.json",
            {"documents": [{"filename": "msa.pdf", "title": "Master Services Agreement"}]},
        )

        entries = read_metadata(sidecar)

        assert len(entries) == 1
        assert entries[0].filename == "msa.pdf"
        assert entries[0].as_metadata()["title"] == "Master Services Agreement"

    def test_missing_file_returns_empty(self, tmp_path: Path) -> None:
        assert read_metadata(tmp_path / "nope.json") == []

    def test_malformed_json_returns_empty(self, tmp_path: Path) -> None:
        sidecar = tmp_path / "db.json"
        sidecar.write_text("{not json", encoding="utf-8")
        assert read_metadata(sidecar) == []

    def test_missing_documents_key_returns_empty(self, tmp_path: Path) -> None:
        sidecar = _write_sidecar(tmp_path / "db.json", {"files": []})
        assert read_metadata(sidecar) == []

    def test_top_level_list_returns_empty(self, tmp_path: Path) -> None:
        sidecar = _write_sidecar(tmp_path / "db.json", [{"filename": "a.pdf"}])
        assert read_metadata(sidecar) == []

    def test_entries_without_filename_are_skipped(self, tmp_path: Path) -> None:
        sidecar = _write_sidecar(
            tmp_path / "db.json",
            {"documents": [{"title": "orphan"}, {"filename": ""}, {"filename": "ok.pdf"}]},
        )

        entries = read_metadata(sidecar)

        assert [e.filename for e in entries] == ["ok.pdf"]


# ======================================================================
# attach_metadata
# ======================================================================


class TestAttachMetadata:
    def test_merges_by_basename(self) -> None:
        docs = [_page("docs/contracts/msa.pdf")]
        entries = [MetadataEntry(filename="msa.pdf", title="MSA", jurisdiction="NY")]

        result = attach_metadata(docs, entries)

        assert result[0].metadata["title"] == "MSA"
        assert result[0].metadata["jurisdiction"] == "NY"
        assert result[0].metadata["filename"] == "msa.pdf"
        assert result[0].metadata["pageContent"] == "Page text"

    def test_match_is_case_sensitive(self) -> None:
        docs = [_page("docs/MSA.pdf")]
        entries = [MetadataEntry(filename="msa.pdf", title="MSA")]

        result = attach_metadata(docs, entries)

        assert "title" not in result[0].metadata
        assert result[0].metadata["pageContent"] == "Page text"

    def test_unmatched_documents_keep_loader_metadata(self) -> None:
        docs = [_page("docs/other.pdf")]

        result = attach_metadata(docs, [])

        assert result[0].metadata["source"] == "docs/other.pdf"
        assert result[0].metadata["loc"] == {"pageNumber": 1}

    def test_reserved_keys_are_not_taken_from_sidecar(self) -> None:
        docs = [_page("docs/msa.pdf", text="real text")]
        entries = [
            MetadataEntry(
                filename="msa.pdf", id="spoofed", pageContent="spoofed", totalPages=999
            )
        ]

        result = attach_metadata(docs, entries)
        metadata = result[0].metadata

        assert "id" not in metadata
        assert "totalPages" not in metadata
        assert metadata["pageContent"] == "real text"

    def test_does_not_mutate_input(self) -> None:
        doc = _page("docs/msa.pdf")
        attach_metadata([doc], [MetadataEntry(filename="msa.pdf", title="MSA")])
        assert "title" not in doc.metadata
        assert "pageContent" not in doc.metadata


# ======================================================================
# flatten_metadata
# ======================================================================


class TestFlattenMetadata:
    def test_pdf_and_loc_are_flattened(self) -> None:
        flat = flatten_metadata(
            {"pdf": {"totalPages": 12}, "loc": {"pageNumber": 2}, "author": "X"}
        )
        assert flat == {"totalPages": 12, "author": "X"}

    def test_page_count_alias(self) -> None:
        assert flatten_metadata({"pdf": {"pageCount": 7}}) == {"totalPages": 7}

    def test_pdf_without_page_count_is_dropped(self) -> None:
        assert flatten_metadata({"pdf": {"version": "1.7"}, "title": "T"}) == {"title": "T"}

    def test_loc_removed_without_pdf(self) -> None:
        assert flatten_metadata({"loc": {"lines": {"from": 1, "to": 3}}, "a": 1}) == {"a": 1}

    def test_none_values_dropped(self) -> None:
        assert flatten_metadata({"a": None, "b": "x"}) == {"b": "x"}

    def test_nested_mapping_is_json_encoded(self) -> None:
        flat = flatten_metadata({"parties": {"buyer": "Acme", "seller": "Globex"}})
        assert json.loads(flat["parties"]) == {"buyer": "Acme", "seller": "Globex"}

    def test_list_items_become_strings(self) -> None:
        assert flatten_metadata({"tags": ["nda", 2]}) == {"tags": ["nda", "2"]}

    def test_scalars_pass_through(self) -> None:
        data = {"s": "text", "i": 3, "f": 1.5, "b": True}
        assert flatten_metadata(data) == data

    def test_input_is_not_mutated(self) -> None:
        original = {"pdf": {"totalPages": 2}, "loc": {"pageNumber": 1}}
        flatten_metadata(original)
        assert original == {"pdf": {"totalPages": 2}, "loc": {"pageNumber": 1}}
