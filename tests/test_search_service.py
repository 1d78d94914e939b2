"""
Unit tests for the linear search, filter and sort pipeline.
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from applitrack.schemas.filters import DateRange, FilterOptions, SalaryFilter, SortOptions
from applitrack.schemas.job import Contact, Document, JobApplication, SalaryRange
from applitrack.services.search_service import (
    apply_view,
    filter_jobs,
    get_categories,
    get_stats,
    search_jobs,
    sort_jobs,
)


def make_job(job_id: str, **overrides) -> JobApplication:
    data = {
        "id": job_id,
        "company": "Acme",
        "role": "Engineer",
        "work_location": "NYC",
        "status": "applied",
        "applied_date": "2024-01-01",
    }
    data.update(overrides)
    return JobApplication(**data)


@pytest.fixture
def mixed_jobs():
    """Five records, two of them at interview stage."""
    return [
        make_job("1", company="Acme", status="applied", applied_date="2024-01-05", priority="low",
                 salary_range=SalaryRange(min="80000", max="100000", currency="USD")),
        make_job("2", company="Globex", role="Designer", status="interview", applied_date="2024-02-10",
                 work_mode="remote", work_location="Remote - US", priority="high", interview_date="2024-02-20"),
        make_job("3", company="initech", role="Analyst", status="rejected", applied_date="2024-03-15",
                 job_type="contract", category="Finance"),
        make_job("4", company="Hooli", role="Engineer", status="interview", applied_date="2024-01-20",
                 priority="medium", interview_date="2024-01-28", category="Software", archived=True),
        make_job("5", company="Umbrella", role="Researcher", status="offered", applied_date="2024-04-01",
                 work_location="Boston", experience_level="senior",
                 salary_range=SalaryRange(min="150000", max="180000")),
    ]


# ============================================
# Linear search
# ============================================

def test_search_scenario_acme_eng():
    """Test the two-term substring scenario."""
    job = make_job("1", company="Acme", role="Engineer", status="applied", applied_date="2024-01-01", work_location="NYC")
    assert search_jobs([job], "acme eng") == [job]


def test_search_empty_query_returns_all(mixed_jobs):
    """Test blank query is the identity."""
    assert search_jobs(mixed_jobs, "") == mixed_jobs
    assert search_jobs(mixed_jobs, "   ") == mixed_jobs


def test_search_matches_substrings_inside_words(mixed_jobs):
    """Test substring matching, unlike the indexed prefix search."""
    results = search_jobs(mixed_jobs, "gineer")
    assert {job.id for job in results} == {"1", "4"}


def test_search_is_case_insensitive(mixed_jobs):
    """Test query and record text are compared lower-cased."""
    assert [job.id for job in search_jobs(mixed_jobs, "INITECH")] == ["3"]


def test_search_all_terms_must_match(mixed_jobs):
    """Test AND semantics across terms."""
    assert [job.id for job in search_jobs(mixed_jobs, "engineer hooli")] == ["4"]
    assert search_jobs(mixed_jobs, "engineer globex") == []


def test_search_includes_contacts_and_documents():
    """Test contact and document text is searchable."""
    job = make_job(
        "1",
        contacts=[Contact(id="c1", name="Jane Recruiter", title="Talent Partner", email="jane@acme.io", type="recruiter")],
        documents=[Document(id="d1", name="resume_v3.pdf", type="resume", upload_date="2024-01-01T00:00:00Z")],
    )
    other = make_job("2", company="Globex")

    assert search_jobs([job, other], "jane") == [job]
    assert search_jobs([job, other], "talent") == [job]
    assert search_jobs([job, other], "acme.io") == [job]
    assert search_jobs([job, other], "resume_v3") == [job]


def test_search_includes_salary_currency(mixed_jobs):
    """Test the salary currency is part of the searchable text."""
    assert [job.id for job in search_jobs(mixed_jobs, "usd")] == ["1"]


# ============================================
# Filter
# ============================================

def test_filter_empty_spec_is_identity(mixed_jobs):
    """Test an empty FilterOptions returns everything."""
    assert filter_jobs(mixed_jobs, FilterOptions()) == mixed_jobs
    assert filter_jobs(mixed_jobs, None) == mixed_jobs


def test_filter_all_sentinel_imposes_nothing(mixed_jobs):
    """Test "all" behaves like an unset field."""
    filters = FilterOptions(status="all", job_type="all", work_mode="all", priority="all")
    assert filter_jobs(mixed_jobs, filters) == mixed_jobs


def test_filter_by_status_scenario(mixed_jobs):
    """Test two of five records are at interview stage."""
    results = filter_jobs(mixed_jobs, FilterOptions(status="interview"))

    assert len(results) == 2
    assert all(job.status == "interview" for job in results)


def test_filter_exact_enum_fields(mixed_jobs):
    """Test job type, work mode, experience level, priority and category."""
    assert [j.id for j in filter_jobs(mixed_jobs, FilterOptions(job_type="contract"))] == ["3"]
    assert [j.id for j in filter_jobs(mixed_jobs, FilterOptions(work_mode="remote"))] == ["2"]
    assert [j.id for j in filter_jobs(mixed_jobs, FilterOptions(experience_level="senior"))] == ["5"]
    assert [j.id for j in filter_jobs(mixed_jobs, FilterOptions(priority="high"))] == ["2"]
    assert [j.id for j in filter_jobs(mixed_jobs, FilterOptions(category="Finance"))] == ["3"]


def test_filter_location_substring(mixed_jobs):
    """Test location matches case-insensitively as a substring."""
    results = filter_jobs(mixed_jobs, FilterOptions(location="remote"))
    assert [job.id for job in results] == ["2"]


def test_filter_salary_overlap(mixed_jobs):
    """Test overlap semantics; records without salary data always pass."""
    results = filter_jobs(mixed_jobs, FilterOptions(salary_range=SalaryFilter(min=90000, max=120000)))
    ids = {job.id for job in results}

    assert "1" in ids       # 80k-100k overlaps
    assert "5" not in ids   # 150k-180k does not
    assert {"2", "3", "4"} <= ids  # no salary data


def test_filter_salary_unparsable_excludes():
    """Test salary text without a leading number fails the salary filter."""
    job = make_job("1", salary_range=SalaryRange(min="competitive"))
    assert filter_jobs([job], FilterOptions(salary_range=SalaryFilter(min=0, max=999999))) == []


def test_filter_date_range_inclusive(mixed_jobs):
    """Test both bounds are inclusive."""
    filters = FilterOptions(date_range=DateRange(start="2024-01-20", end="2024-03-15"))
    assert [job.id for job in filter_jobs(mixed_jobs, filters)] == ["2", "3", "4"]


def test_filter_date_range_unparsable_applied_date_excluded():
    """Test a record whose applied date does not parse fails a date filter."""
    job = make_job("1", applied_date="last tuesday")
    filters = FilterOptions(date_range=DateRange(start="2024-01-01", end="2024-12-31"))
    assert filter_jobs([job], filters) == []


def test_filter_has_interview(mixed_jobs):
    """Test has_interview derives from status, date or link."""
    linked = make_job("6", status="applied", interview_link="https://meet.example/abc")
    jobs = mixed_jobs + [linked]

    with_interview = {job.id for job in filter_jobs(jobs, FilterOptions(has_interview=True))}
    without_interview = {job.id for job in filter_jobs(jobs, FilterOptions(has_interview=False))}

    assert with_interview == {"2", "4", "6"}
    assert without_interview == {"1", "3", "5"}


def test_filter_archived(mixed_jobs):
    """Test archived filter is an exact boolean match."""
    assert [job.id for job in filter_jobs(mixed_jobs, FilterOptions(archived=True))] == ["4"]
    assert len(filter_jobs(mixed_jobs, FilterOptions(archived=False))) == 4


def test_filter_is_idempotent(mixed_jobs):
    """Test filtering twice equals filtering once."""
    filters = FilterOptions(status="interview", archived=False, location="us")
    once = filter_jobs(mixed_jobs, filters)
    assert filter_jobs(once, filters) == once


def test_filter_rejects_unknown_enum_value():
    """Test FilterOptions is a closed schema."""
    with pytest.raises(ValidationError):
        FilterOptions(status="ghosted")


# ============================================
# Sort
# ============================================

def test_sort_applied_date_desc_then_asc_reverses(mixed_jobs):
    """Test distinct dates give exactly reversed orders."""
    desc = sort_jobs(mixed_jobs, SortOptions(field="appliedDate", order="desc"))
    asc = sort_jobs(mixed_jobs, SortOptions(field="appliedDate", order="asc"))

    assert [job.id for job in desc] == ["5", "3", "2", "4", "1"]
    assert asc == list(reversed(desc))


def test_sort_does_not_mutate_input(mixed_jobs):
    """Test a new list is returned."""
    original = list(mixed_jobs)
    sort_jobs(mixed_jobs, SortOptions(field="company", order="asc"))
    assert mixed_jobs == original


def test_sort_company_case_insensitive(mixed_jobs):
    """Test lower-case names collate with capitalized ones."""
    result = sort_jobs(mixed_jobs, SortOptions(field="company", order="asc"))
    assert [job.company for job in result] == ["Acme", "Globex", "Hooli", "initech", "Umbrella"]


def test_sort_priority_with_missing_as_zero(mixed_jobs):
    """Test high > medium > low > unset."""
    result = sort_jobs(mixed_jobs, SortOptions(field="priority", order="desc"))
    assert [job.id for job in result] == ["2", "4", "1", "3", "5"]


def test_sort_interview_date_missing_first_ascending(mixed_jobs):
    """Test records without an interview date sort as the epoch."""
    result = sort_jobs(mixed_jobs, SortOptions(field="interviewDate", order="asc"))
    assert [job.id for job in result][-2:] == ["4", "2"]
    assert {job.id for job in result[:3]} == {"1", "3", "5"}


def test_sort_is_stable_for_ties():
    """Test equal keys keep input order."""
    jobs = [make_job(str(i), status="applied") for i in range(5)]
    result = sort_jobs(jobs, SortOptions(field="status", order="desc"))
    assert [job.id for job in result] == ["0", "1", "2", "3", "4"]


# ============================================
# View pipeline and helpers
# ============================================

def test_apply_view_search_filter_sort(mixed_jobs):
    """Test the composed pipeline."""
    result = apply_view(
        mixed_jobs,
        query="e",
        filters=FilterOptions(archived=False),
        sort=SortOptions(field="company", order="desc"),
    )
    assert [job.company for job in result] == sorted(
        [job.company for job in result], key=str.casefold, reverse=True
    )
    assert all(not job.archived for job in result)


def test_get_categories(mixed_jobs):
    """Test distinct sorted categories."""
    assert get_categories(mixed_jobs) == ["Finance", "Software"]


def test_get_stats(mixed_jobs):
    """Test dashboard counters."""
    now = datetime(2024, 2, 15, tzinfo=timezone.utc)
    stats = get_stats(mixed_jobs, now=now)

    assert stats.total == 5
    assert stats.applied == 1
    assert stats.interviews == 2
    assert stats.offers == 1
    assert stats.rejected == 1
    assert stats.upcoming_interviews == 1
    assert stats.high_priority == 1
