"""
API tests for the schedule, export and results routes against the bundled sample.
"""

import csv
import io

import pytest

from backend.schedule_exporters import criterion_schedule_from_json


def test_criterion_schedule_default_levels(client):
    response = client.get("/api/schedules/criteria")
    assert response.status_code == 200
    data = response.json()

    assert data["levels"] == ["A", "AA"]
    numbers = [item["scNumber"] for item in data["schedule"]]
    assert numbers == [
        "1.1.1",
        "1.2.2",
        "1.4.3",
        "1.4.4",
        "1.4.10",
        "2.1.1",
        "2.4.4",
        "2.4.6",
        "2.4.7",
        "3.3.2",
        "4.1.2",
    ]
    assert data["stats"]["totalSC"] == 11
    assert data["stats"]["byLevel"] == {"A": 6, "AA": 5, "AAA": 0}


def test_criterion_schedule_level_a(client):
    data = client.get("/api/schedules/criteria", params={"levels": "a"}).json()
    assert data["levels"] == ["A"]
    assert len(data["schedule"]) == 6
    assert {item["scLevel"] for item in data["schedule"]} == {"A"}


def test_default_levels_from_env(client, monkeypatch):
    monkeypatch.setenv("SCHEDULE_DEFAULT_LEVELS", "AAA")
    data = client.get("/api/schedules/criteria").json()
    assert [item["scNumber"] for item in data["schedule"]] == ["1.2.6", "1.4.6"]


def test_invalid_level_is_rejected(client):
    response = client.get("/api/schedules/criteria", params={"levels": "A,Z"})
    assert response.status_code == 400
    assert "Z" in response.json()["error"]


def test_criterion_item_payload(client):
    data = client.get("/api/schedules/criteria", params={"levels": "A"}).json()
    item = next(i for i in data["schedule"] if i["id"] == "non-text-content")

    assert item["principle"] == "1 Perceivable"
    assert item["requiresSight"] is True
    ids = [t["id"] for t in item["sufficientTechniques"]]
    assert ids.count("H37") == 1
    assert item["sufficientTechniques"][0]["url"].startswith("https://www.w3.org/WAI/WCAG22/Techniques/")
    assert item["failures"][0]["url"].startswith("https://www.w3.org/WAI/WCAG22/Techniques/failures/")


def test_hide_advisory_and_failures(client):
    data = client.get(
        "/api/schedules/criteria",
        params={"levels": "A", "includeAdvisory": "false", "includeFailures": "0"},
    ).json()

    assert all(item["advisoryTechniques"] == [] for item in data["schedule"])
    assert all(item["failures"] == [] for item in data["schedule"])
    assert data["stats"]["totalFailures"] == 0


@pytest.mark.parametrize(
    "params, expected",
    [
        ({"sight": "true"}, ["1.1.1", "1.2.2"]),
        ({"hearing": "true"}, ["1.2.2"]),
        ({"motor": "true"}, ["2.1.1", "2.4.4"]),
        ({"sight": "false", "motor": "false"}, ["3.3.2", "4.1.2"]),
    ],
)
def test_sensory_filter(client, params, expected):
    data = client.get("/api/schedules/criteria", params={"levels": "A", **params}).json()
    assert [item["scNumber"] for item in data["schedule"]] == expected


def test_component_schedule(client):
    response = client.get("/api/schedules/components", params={"levels": "A,AA"})
    assert response.status_code == 200
    data = response.json()

    names = [c["category"] for c in data["categories"]]
    assert names == sorted(names, key=str.casefold)
    assert "Images & Graphics" in names
    assert data["stats"]["totalCategories"] == len(names)
    for category in data["categories"]:
        assert category["totalTime"] == sum(c["estimatedTime"] for c in category["components"])


def test_criteria_lookup(client):
    response = client.get("/api/criteria/1.4.10")
    assert response.status_code == 200
    data = response.json()
    assert data["criterion"]["id"] == "reflow"
    assert data["guideline"] == "1.4 Distinguishable"

    missing = client.get("/api/criteria/does-not-exist")
    assert missing.status_code == 404
    assert "error" in missing.json()


def test_criterion_markdown_download(client):
    response = client.get("/api/schedules/criteria/markdown", params={"levels": "A"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/markdown")
    assert 'filename="wcag-testing-schedule-criteria-a.md"' in response.headers["content-disposition"]
    assert response.text.startswith("# WCAG 2.2 Testing Schedule - Success Criteria Based")


def test_component_markdown_download(client):
    response = client.get("/api/schedules/components/markdown")
    assert response.status_code == 200
    assert "wcag-testing-schedule-components-a-aa.md" in response.headers["content-disposition"]
    assert response.text.startswith("# WCAG 2.2 Testing Schedule - Component/Technique Based")


def test_criterion_json_export_round_trips(client):
    response = client.get("/api/schedules/criteria/export", params={"levels": "AA"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")

    schedule = criterion_schedule_from_json(response.text)
    assert [item.sc_number for item in schedule] == ["1.4.3", "1.4.4", "1.4.10", "2.4.6", "2.4.7"]


def test_component_json_export(client):
    response = client.get("/api/schedules/components/export", params={"levels": "A"})
    assert response.status_code == 200
    assert "wcag-testing-schedule-components-a.json" in response.headers["content-disposition"]
    assert isinstance(response.json(), list)


def test_results_csv(client):
    payload = {
        "levels": ["A"],
        "results": {
            "non-text-content": {
                "conformance": "Supports",
                "observations": "All images have alt text",
                "testedBy": "QA",
                "testedDate": "2024-05-02",
                "tools": ["NVDA", "Chrome"],
            },
            "not-in-schedule": {"conformance": "Not Applicable"},
        },
    }
    response = client.post("/api/results/csv", json=payload)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="wcag-test-results-a.csv"' in response.headers["content-disposition"]

    body = response.content.decode("utf-8")
    assert body.startswith("\ufeff")
    rows = list(csv.reader(io.StringIO(body.lstrip("\ufeff"))))

    assert rows[0][0] == "SC Number"
    assert len(rows) == 7
    assert rows[1] == [
        "1.1.1",
        "Non-text Content",
        "A",
        "Supports",
        "All images have alt text",
        "QA",
        "2024-05-02",
        "NVDA, Chrome",
    ]
    assert all(row[3] == "Not Tested" for row in rows[2:])


def test_results_csv_rejects_unknown_status(client):
    payload = {"results": {"non-text-content": {"conformance": "Maybe"}}}
    response = client.post("/api/results/csv", json=payload)
    assert response.status_code == 422


def test_results_csv_custom_filename_is_sanitized(client):
    payload = {"levels": ["AA"], "filename": "../my results.csv"}
    response = client.post("/api/results/csv", json=payload)
    assert response.status_code == 200
    assert 'filename="my_results.csv"' in response.headers["content-disposition"]


def test_broken_dataset_path_returns_500(client, monkeypatch, tmp_path):
    monkeypatch.setenv("WCAG_DATA_PATH", str(tmp_path / "missing.json"))

    for url in ("/api/schedules/criteria", "/api/schedules/components", "/api/criteria/1.1.1"):
        response = client.get(url)
        assert response.status_code == 500
        assert "WCAG dataset unavailable" in response.json()["error"]
