from io import BytesIO

import pytest
from PIL import Image
from pypdf import PdfReader


def _pdf_text(content: bytes) -> str:
    reader = PdfReader(BytesIO(content))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


SAMPLE = {
    "firstName": "Grace",
    "lastName": "Hopper",
    "email": "grace@navy.example",
    "phone": "555-0100",
    "location": "Arlington",
    "currentPosition": "Rear Admiral",
    "summary": "Pioneer of compilers & COBOL <tags> stay literal.",
    "skills": ["COBOL", "FLOW-MATIC"],
    "experience": [
        {
            "title": "Computer Scientist",
            "company": "US Navy",
            "startDate": "1943",
            "endDate": "1986",
            "description": ["Wrote the first compiler for a programming language"],
        }
    ],
    "education": [{"degree": "PhD Mathematics", "institution": "Yale", "graduationDate": "1934"}],
    "languages": ["English (Native)"],
    "certifications": [],
}


def test_render_resume_produces_pdf():
    from backend.app.services.resume_export import render_resume

    pdf = render_resume(SAMPLE, "modernProfessional")
    assert pdf.startswith(b"%PDF")
    text = _pdf_text(pdf)
    assert "Grace Hopper" in text
    assert "Rear Admiral" in text
    assert "US Navy" in text
    assert "<tags>" in text


@pytest.mark.parametrize("template", ["modernProfessional", "executiveStyle", "creativeProfessional"])
def test_every_template_renders(template):
    from backend.app.services.resume_export import render_resume

    pdf = render_resume(SAMPLE, template)
    assert "Work Experience" in _pdf_text(pdf)


def test_unknown_template_is_validation_error():
    from backend.app.services.resume_export import render_resume
    from backend.app.utils.error_handlers import ValidationError

    with pytest.raises(ValidationError):
        render_resume(SAMPLE, "neonPunk")


def test_long_experience_paginates():
    from backend.app.services.resume_export import render_resume

    data = dict(SAMPLE)
    data["experience"] = [
        {"title": f"Role {i}", "company": "Co", "description": ["Did a great many important things"] * 4}
        for i in range(40)
    ]
    reader = PdfReader(BytesIO(render_resume(data)))
    assert len(reader.pages) > 1


def test_build_resume_data_from_form_entries():
    from backend.app.services.resume_export import build_resume_data

    data = build_resume_data({
        "firstName": "Jane",
        "lastName": "Doe",
        "currentPosition": "Developer",
        "skills": "JS, SQL",
        "experience": '[{"yearFrom": "2019", "yearTo": "2023", "jobTitle": "Dev", "company": "Acme",'
                      ' "responsibilities": ["Shipped the checkout flow"]}]',
        "education": '[{"yearFrom": "2014", "yearTo": "2018", "institution": "TU Delft", "subject": "CS"}]',
        "languages": '[{"language": "Dutch", "proficiency": "Native"}]',
        "certifications": '[{"year": "2020", "name": "AWS SA"}]',
        "coverLetter": "Hello there",
    })
    assert data["skills"] == ["JS", "SQL"]
    assert data["experience"] == [{
        "title": "Dev",
        "company": "Acme",
        "startDate": "2019",
        "endDate": "2023",
        "description": ["Shipped the checkout flow"],
    }]
    assert data["education"] == [{"degree": "CS", "institution": "TU Delft", "graduationDate": "2014 - 2018"}]
    assert data["languages"] == ["Dutch (Native)"]
    assert data["certifications"] == ["AWS SA (2020)"]
    assert data["summary"] == "Hello there"


def test_build_resume_data_splits_free_text_experience():
    from backend.app.services.resume_export import build_resume_data

    data = build_resume_data({
        "currentPosition": "Analyst",
        "experience": "• Built quarterly reporting pipeline • Automated invoice matching - ok",
    })
    entry = data["experience"][0]
    assert entry["title"] == "Analyst"
    assert entry["description"] == ["Built quarterly reporting pipeline", "Automated invoice matching"]


def test_build_resume_data_stringifies_numeric_entry_fields():
    from backend.app.services.resume_export import build_resume_data

    data = build_resume_data({
        "experience": '[{"title": "Dev", "company": 42, "yearFrom": 2019, "description": 7}]',
        "education": '[{"degree": 2020, "institution": "TU"}]',
    })
    assert data["experience"][0]["company"] == "42"
    assert data["experience"][0]["description"] == ["7"]
    assert data["education"][0]["degree"] == "2020"


def test_export_candidate_with_numeric_json_text_entries(client, staff_headers):
    r = client.post(
        "/candidates",
        json={
            "firstName": "Linus",
            "lastName": "Numbers",
            "email": "linus@example.com",
            "experience": '[{"title": "Dev", "company": 42, "yearFrom": 2019}]',
            "education": '[{"degree": 2020, "institution": "TU"}]',
        },
        headers=staff_headers,
    )
    assert r.status_code == 201, r.text
    cid = r.json()["candidate"]["id"]

    r = client.get(f"/candidates/{cid}/export", headers=staff_headers)
    assert r.status_code == 200, r.text
    text = _pdf_text(r.content)
    assert "42" in text
    assert "2020" in text


def _candidate(client, headers) -> int:
    r = client.post(
        "/candidates",
        json={
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "currentPosition": "Analyst",
            "skills": ["Mathematics"],
            "experience": [{"jobTitle": "Analyst", "company": "Analytical Engine Co"}],
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()["candidate"]["id"]


def test_candidate_export_endpoint(client, staff_headers):
    cid = _candidate(client, staff_headers)
    r = client.get(f"/candidates/{cid}/export", headers=staff_headers)
    assert r.status_code == 200, r.text
    assert r.headers["content-type"] == "application/pdf"
    assert 'filename="Ada_Lovelace_resume.pdf"' in r.headers["content-disposition"]
    assert r.content.startswith(b"%PDF")
    assert "Analytical Engine Co" in _pdf_text(r.content)


def test_candidate_export_unknown_template(client, staff_headers):
    cid = _candidate(client, staff_headers)
    r = client.get(f"/candidates/{cid}/export", params={"template": "nope"}, headers=staff_headers)
    assert r.status_code == 400, r.text


def test_export_requires_staff(client):
    assert client.get("/candidates/1/export").status_code == 401


def test_export_missing_candidate_is_404(client, staff_headers):
    assert client.get("/candidates/999/export", headers=staff_headers).status_code == 404


def test_export_uses_saved_settings_and_logo(client, staff_headers):
    buf = BytesIO()
    Image.new("RGB", (40, 20), (44, 50, 66)).save(buf, format="PNG")
    logo = client.post(
        "/upload/logo",
        files={"logo": ("brand.png", buf.getvalue(), "image/png")},
        headers=staff_headers,
    ).json()["fileName"]
    client.post(
        "/templates/settings",
        json={"templateStyle": "creativeProfessional", "logoFile": logo},
        headers=staff_headers,
    )

    from backend.app.api.exports import resolve_export_options

    me = client.get("/auth/me", headers=staff_headers).json()["user"]
    template, logo_path = resolve_export_options(me["id"], None, None)
    assert template == "creativeProfessional"
    assert logo_path and logo_path.endswith(logo)

    # An explicit query parameter beats the saved setting.
    template, _ = resolve_export_options(me["id"], "executiveStyle", None)
    assert template == "executiveStyle"

    cid = _candidate(client, staff_headers)
    r = client.get(f"/candidates/{cid}/export", headers=staff_headers)
    assert r.status_code == 200, r.text
    assert r.content.startswith(b"%PDF")


def test_application_export_endpoint(client, staff_headers):
    app_id = client.post(
        "/applications/submit",
        json={"firstName": "Jane", "lastName": "Doe", "email": "jane@x.io", "coverLetter": "Keen to join"},
    ).json()["application"]["id"]

    r = client.get(f"/applications/{app_id}/export", headers=staff_headers)
    assert r.status_code == 200, r.text
    assert "Keen to join" in _pdf_text(r.content)


def test_export_arbitrary_body(client, staff_headers):
    r = client.post(
        "/exports/resume",
        params={"template": "executiveStyle"},
        json={"firstName": "Linus", "lastName": "T", "skills": "C, Git"},
        headers=staff_headers,
    )
    assert r.status_code == 200, r.text
    text = _pdf_text(r.content)
    assert "Linus T" in text
    assert "Git" in text


def test_list_resume_templates(client, staff_headers):
    r = client.get("/exports/templates", headers=staff_headers)
    assert r.status_code == 200, r.text
    names = [t["name"] for t in r.json()["templates"]]
    assert names == ["modernProfessional", "executiveStyle", "creativeProfessional"]
    assert r.json()["default"] == "modernProfessional"
