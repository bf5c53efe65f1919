"""
Tests for Section Comparison Models
===================================
"""

import dataclasses

import pytest

from section_compare.models import (
    Section,
    ComparisonRecord,
    ComparisonReport,
    InvalidInputError,
    record_id,
)


def _record(section='Summary', status='match', similarity=100):
    return ComparisonRecord(
        id=record_id(section),
        section=section,
        source_content='x',
        target_content='x' if status == 'match' else 'y',
        status=status,
        similarity=similarity,
    )


class TestSection:
    """Tests for Section construction."""

    def test_coerce_from_dict(self):
        section = Section.coerce({'name': 'Title', 'text': 'Annual Report'})
        assert section == Section('Title', 'Annual Report')

    def test_coerce_missing_text_is_empty(self):
        assert Section.coerce({'name': 'Title'}).text == ''
        assert Section.coerce({'name': 'Title', 'text': None}).text == ''

    def test_coerce_returns_existing_section(self):
        section = Section('Title', 'x')
        assert Section.coerce(section) is section

    def test_coerce_rejects_other_types(self):
        with pytest.raises(InvalidInputError):
            Section.coerce(42, side='source', index=3)

    def test_sections_are_immutable(self):
        section = Section('Title', 'x')
        with pytest.raises(dataclasses.FrozenInstanceError):
            section.text = 'y'

    def test_to_dict(self):
        assert Section('A', 'b').to_dict() == {'name': 'A', 'text': 'b'}


class TestRecordId:
    """Record identifiers derive from the section name."""

    def test_deterministic(self):
        assert record_id('Title Page') == record_id('Title Page')

    def test_readable_prefix(self):
        assert record_id('Title Page').startswith('title-page-')

    def test_similar_slugs_stay_distinct(self):
        assert record_id('Title Page') != record_id('title page')

    def test_non_ascii_name(self):
        assert record_id('요약').startswith('section-')


class TestComparisonRecord:
    """Tests for ComparisonRecord validation and serialization."""

    def test_rejects_unknown_status(self):
        with pytest.raises(ValueError):
            _record(status='changed')

    def test_rejects_out_of_range_similarity(self):
        with pytest.raises(ValueError):
            _record(status='different', similarity=101)

    def test_is_change(self):
        assert not _record().is_change
        assert _record(status='different', similarity=50).is_change

    def test_to_dict_keys(self):
        data = _record().to_dict()
        assert set(data) == {'id', 'section', 'source_content', 'target_content',
                             'status', 'similarity'}


class TestComparisonReport:
    """Tests for ComparisonReport."""

    def test_records_stored_as_tuple(self):
        report = ComparisonReport([_record('A'), _record('B')])
        assert isinstance(report.records, tuple)
        assert len(report) == 2

    def test_get_and_by_status(self):
        report = ComparisonReport([
            _record('A'),
            _record('B', status='different', similarity=40),
        ])
        assert report.get('B').similarity == 40
        assert report.get('C') is None
        assert [r.section for r in report.by_status('match')] == ['A']

    def test_stats(self):
        report = ComparisonReport([
            _record('A'),
            _record('B', status='added', similarity=0),
            _record('C', status='added', similarity=0),
        ])
        assert report.stats == {'match': 1, 'different': 0, 'added': 2, 'missing': 0, 'total': 3}

    def test_to_dict(self):
        report = ComparisonReport([_record('A')])
        data = report.to_dict()
        assert data['stats']['total'] == 1
        assert data['records'][0]['section'] == 'A'
