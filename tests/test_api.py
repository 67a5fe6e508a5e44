from fastapi.testclient import TestClient

from slugmap.main import create_app
from slugmap.settings import Settings

SITEMAP = b"""<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://a.com/</loc></url>
  <url><loc>https://a.com/pricing</loc></url>
  <url><loc>https://b.com/x</loc></url>
</urlset>
"""

REDIRECTS = b"Old Page URL,Destination Page URL,Redirect Type\n/old,pricing,301\n/legacy,,\n"


def _client(**overrides):
    return TestClient(create_app(Settings(**overrides)))


def _upload(client, path, name, content, content_type):
    return client.post(path, files={"file": (name, content, content_type)})


def _loaded_client(**overrides):
    client = _client(**overrides)
    assert _upload(client, "/sitemap", "sitemap.xml", SITEMAP, "application/xml").status_code == 200
    assert _upload(client, "/redirects", "redirects.csv", REDIRECTS, "text/csv").status_code == 200
    return client


def test_redirect_upload_before_sitemap_conflicts():
    client = _client()
    r = _upload(client, "/redirects", "redirects.csv", REDIRECTS, "text/csv")
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "no_sitemap_loaded"


def test_malformed_sitemap_is_rejected():
    client = _client()
    r = _upload(client, "/sitemap", "sitemap.xml", b"<urlset><url>", "application/xml")
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "malformed_markup"
    assert client.get("/slugs").json() == {"count": 0, "slugs": []}


def test_missing_columns_are_rejected():
    client = _client()
    _upload(client, "/sitemap", "sitemap.xml", SITEMAP, "application/xml")
    r = _upload(client, "/redirects", "redirects.csv", b"Old Page URL\n/a\n", "text/csv")
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "missing_required_columns"
    assert client.get("/redirects").json() == {"count": 0, "redirects": []}


def test_full_flow_and_downloads():
    client = _loaded_client()

    assert client.get("/slugs").json() == {"count": 2, "slugs": ["/", "/pricing"]}

    records = client.get("/redirects").json()["redirects"]
    assert records == [
        {"old": "/old", "destination": "/pricing", "type": "301"},
        {"old": "/legacy", "destination": "", "type": "301"},
    ]

    r = client.put("/redirects/1", json={"destination": "checkout"})
    assert r.status_code == 200
    assert r.json()["redirects"][1]["destination"] == "/checkout"

    r = client.get("/redirects.csv")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert 'filename="formatted-redirects.csv"' in r.headers["content-disposition"]
    assert r.text == "Old Page URL,Destination Page URL,Redirect Type\n/old,/pricing,301\n/legacy,/checkout,301"

    r = client.get("/slugs.csv")
    assert 'filename="sitemap-slugs.csv"' in r.headers["content-disposition"]
    assert r.text == "Slug\n/\n/pricing"


def test_bulk_destination():
    client = _loaded_client()
    r = client.post("/redirects/bulk", json={"destination": "https://a.com/thanks"})
    assert r.status_code == 200
    data = r.json()
    assert data["count"] == 2
    assert [row["destination"] for row in data["redirects"]] == ["/thanks", "/thanks"]
    assert [row["old"] for row in data["redirects"]] == ["/old", "/legacy"]


def test_bulk_destination_empty_is_noop():
    client = _loaded_client()
    r = client.post("/redirects/bulk", json={"destination": ""})
    assert [row["destination"] for row in r.json()["redirects"]] == ["/pricing", ""]


def test_edit_out_of_range():
    client = _loaded_client()
    r = client.put("/redirects/5", json={"destination": "/x"})
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "index_out_of_range"


def test_downloads_need_data():
    client = _client()
    assert client.get("/slugs.csv").status_code == 404
    assert client.get("/redirects.csv").status_code == 404


def test_upload_size_limit():
    client = _client(max_upload_bytes=10)
    r = _upload(client, "/sitemap", "sitemap.xml", SITEMAP, "application/xml")
    assert r.status_code == 413


def test_preview_limit_from_settings():
    client = _client(preview_limit=1)
    r = _upload(client, "/sitemap", "sitemap.xml", SITEMAP, "application/xml")
    assert r.json()["preview"] == ["/", "+1 more"]


def test_latin1_redirect_table_is_decoded():
    client = _client()
    _upload(client, "/sitemap", "sitemap.xml", SITEMAP, "application/xml")
    raw = "Old Page URL,Destination Page URL,Redirect Type\n/café-montréal,/pricing,301\n".encode("latin-1")
    r = _upload(client, "/redirects", "redirects.csv", raw, "text/csv")
    assert r.status_code == 200
    assert r.json()["redirects"][0]["old"] == "/café-montréal"


def test_utf8_bom_is_stripped():
    client = _client()
    _upload(client, "/sitemap", "sitemap.xml", SITEMAP, "application/xml")
    raw = b"\xef\xbb\xbf" + REDIRECTS
    r = _upload(client, "/redirects", "redirects.csv", raw, "text/csv")
    assert r.status_code == 200
    assert r.json()["count"] == 2


def test_large_sitemap_upload():
    client = _client()
    body = "".join(f"<url><loc>https://a.com/page-{i}</loc></url>" for i in range(2000))
    content = f"<urlset>{body}</urlset>".encode("utf-8")
    r = _upload(client, "/sitemap", "sitemap.xml", content, "application/xml")
    assert r.status_code == 200
    data = r.json()
    assert data["count"] == 2000
    assert data["slugs"][-1] == "/page-1999"
    assert data["preview"][-1] == "+1980 more"
