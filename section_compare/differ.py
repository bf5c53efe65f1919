"""
Section Differ v1.0.0
=====================
Name-based section alignment with per-section status classification.

Sections of two extracted documents are paired by name. Each name in
either document yields exactly one ComparisonRecord:
- match: present in both, same text after trimming surrounding whitespace
- different: present in both, text differs (scored 1-99)
- added: present only in the target
- missing: present only in the source

Word-level highlighting for changed sections uses diff-match-patch.
Author: SectionCompare
"""

import html
from typing import Any, Dict, Iterable, List, Tuple

import diff_match_patch as dmp_module

from config_logging import get_logger
from .models import (
    Section,
    ComparisonRecord,
    ComparisonReport,
    InvalidInputError,
    record_id,
    STATUS_MATCH,
    STATUS_DIFFERENT,
    STATUS_ADDED,
    STATUS_MISSING,
)
from .similarity import SimilarityScorer

logger = get_logger('section_compare.differ')


class SectionDiffer:
    """
    Section comparison engine.

    Instances hold only configuration; compare() keeps no state between
    calls and may be used from several threads at once.
    """

    def __init__(self, metric: str = 'levenshtein'):
        """
        Initialize the differ.

        Args:
            metric: Similarity metric for 'different' sections
                    ('levenshtein' or 'token_jaccard')
        """
        self.scorer = SimilarityScorer(metric)

    @property
    def metric(self) -> str:
        return self.scorer.metric

    def compare(
        self,
        source_sections: Iterable[Any],
        target_sections: Iterable[Any]
    ) -> ComparisonReport:
        """
        Compare two extracted documents section by section.

        Args:
            source_sections: Ordered sections of the source document
            target_sections: Ordered sections of the target document

        Returns:
            ComparisonReport with one record per distinct section name

        Raises:
            InvalidInputError: if any section has an empty or missing name;
                               no partial report is produced
        """
        try:
            source = self._normalize(source_sections, 'source')
            target = self._normalize(target_sections, 'target')
        except InvalidInputError as e:
            logger.warning(f"Rejected comparison input: {e}", side=e.side, index=e.index)
            raise

        source_lookup = self._build_lookup(source)
        target_lookup = self._build_lookup(target)

        logger.info(f"Starting comparison: source={len(source_lookup)} sections, "
                    f"target={len(target_lookup)} sections", metric=self.metric)

        records = [
            self._compare_section(name, source_lookup, target_lookup)
            for name in self._ordered_names(source_lookup, target_lookup)
        ]
        report = ComparisonReport(records)

        stats = report.stats
        logger.info(f"Comparison complete: {stats['total']} sections "
                    f"(={stats['match']}, ~{stats['different']}, "
                    f"+{stats['added']}, -{stats['missing']})")
        return report

    def _normalize(self, sections: Iterable[Any], side: str) -> List[Section]:
        """Validate every section of one side before any record is built."""
        if sections is None:
            return []
        return [
            Section.coerce(value, side=side, index=index)
            for index, value in enumerate(sections)
        ]

    def _build_lookup(self, sections: List[Section]) -> Dict[str, str]:
        """
        Map section name to text.

        A repeated name keeps its first position while its text is replaced
        by the later occurrence (dict insertion order is not changed by
        reassignment).
        """
        lookup: Dict[str, str] = {}
        for section in sections:
            if section.name in lookup:
                logger.debug(f"Duplicate section name '{section.name}': last occurrence wins")
            lookup[section.name] = section.text
        return lookup

    def _ordered_names(
        self,
        source_lookup: Dict[str, str],
        target_lookup: Dict[str, str]
    ) -> List[str]:
        """Source names in source order, then target-only names in target order."""
        names = list(source_lookup)
        names.extend(name for name in target_lookup if name not in source_lookup)
        return names

    def _compare_section(
        self,
        name: str,
        source_lookup: Dict[str, str],
        target_lookup: Dict[str, str]
    ) -> ComparisonRecord:
        """Classify one section name."""
        in_source = name in source_lookup
        in_target = name in target_lookup

        if in_source and in_target:
            source_text = source_lookup[name]
            target_text = target_lookup[name]
            source_trimmed = source_text.strip()
            target_trimmed = target_text.strip()

            if source_trimmed == target_trimmed:
                status, score = STATUS_MATCH, 100
                # Matched records carry identical content
                source_text = target_text = source_trimmed
            else:
                status = STATUS_DIFFERENT
                # 100 is reserved for matches and 0 for one-sided sections
                score = min(99, max(1, self.scorer.score(source_trimmed, target_trimmed)))

            return ComparisonRecord(
                id=record_id(name),
                section=name,
                source_content=source_text,
                target_content=target_text,
                status=status,
                similarity=score
            )

        if in_target:
            return ComparisonRecord(
                id=record_id(name),
                section=name,
                source_content='',
                target_content=target_lookup[name],
                status=STATUS_ADDED,
                similarity=0
            )

        return ComparisonRecord(
            id=record_id(name),
            section=name,
            source_content=source_lookup[name],
            target_content='',
            status=STATUS_MISSING,
            similarity=0
        )

    def highlight(self, source_text: str, target_text: str) -> Tuple[str, str]:
        """
        Word-level diff markup of two section texts.

        Args:
            source_text: Text from the source document
            target_text: Text from the target document

        Returns:
            Tuple of (source_html, target_html)
        """
        dmp = dmp_module.diff_match_patch()
        dmp.Diff_Timeout = 2.0  # Max 2 seconds per diff
        diffs = dmp.diff_main(source_text or '', target_text or '')
        dmp.diff_cleanupSemantic(diffs)

        source_parts = []
        target_parts = []

        for op, text in diffs:
            escaped = html.escape(text)

            if op == dmp.DIFF_EQUAL:
                source_parts.append(escaped)
                target_parts.append(escaped)
            elif op == dmp.DIFF_DELETE:
                source_parts.append(f'<span class="sc-word-deleted">{escaped}</span>')
            elif op == dmp.DIFF_INSERT:
                target_parts.append(f'<span class="sc-word-added">{escaped}</span>')

        return ''.join(source_parts), ''.join(target_parts)

    def highlight_record(self, record: ComparisonRecord) -> Dict[str, Any]:
        """
        Record dictionary with highlight markup for 'different' records.

        Other statuses get their escaped content unchanged.
        """
        data = record.to_dict()
        if record.status == STATUS_DIFFERENT:
            data['source_html'], data['target_html'] = self.highlight(
                record.source_content, record.target_content
            )
        else:
            data['source_html'] = html.escape(record.source_content)
            data['target_html'] = html.escape(record.target_content)
        return data


# Convenience function
def compare(
    source_sections: Iterable[Any],
    target_sections: Iterable[Any],
    metric: str = 'levenshtein'
) -> ComparisonReport:
    """
    Compare two extracted documents.

    Args:
        source_sections: Sections as Section objects, {name, text} dicts,
                         or (name, text) pairs
        target_sections: Same, for the target document
        metric: Similarity metric name

    Returns:
        ComparisonReport
    """
    return SectionDiffer(metric).compare(source_sections, target_sections)


if __name__ == '__main__':
    source = [
        {'name': 'Title Page', 'text': 'Annual Report 2023'},
        {'name': 'Executive Summary', 'text': 'Revenue increased by 15% compared to previous year.'},
        {'name': 'Financial Overview', 'text': 'Total assets: $2.5M, Liabilities: $800K'},
        {'name': 'Risk Assessment', 'text': 'Key risks include market volatility.'},
    ]
    target = [
        {'name': 'Title Page', 'text': 'Annual Report 2024'},
        {'name': 'Executive Summary', 'text': 'Revenue increased by 15% compared to previous year.'},
        {'name': 'Financial Overview', 'text': 'Total assets: $3.2M, Liabilities: $900K'},
        {'name': 'Future Projections', 'text': 'Expected growth of 20% in the next fiscal year.'},
    ]

    report = compare(source, target)
    print(f"Sections: {report.stats}")
    for record in report:
        print(f"  [{record.status:>9}] {record.similarity:>3}%  {record.section}")
