"""Tests for invoice routes."""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from backoffice.models import Company, Operation, Ship


@pytest.fixture
def references(db):
    company = Company(nom="Mediterranean Shipping", code="MSC", active=True)
    db.session.add(company)
    db.session.flush()
    ship = Ship(nom="MSC Gülsün", numero_imo="9839430", company_id=company.id, active=True)
    pilotage = Operation(nom="Pilotage", code="PILOT", prix_xof=Decimal("1000"), active=True)
    db.session.add_all([ship, pilotage])
    db.session.commit()
    return {
        "company_id": str(company.id),
        "ship_id": str(ship.id),
        "operation_id": str(pilotage.id),
    }


@pytest.fixture
def operator(make_user, auth_headers):
    return auth_headers(make_user("operator", roles=["OPERATOR"]))


@pytest.fixture
def manager(make_user, auth_headers):
    return auth_headers(make_user("manager", roles=["MANAGER"]))


def invoice_payload(references, **overrides):
    today = date.today()
    payload = {
        "company_id": references["company_id"],
        "ship_id": references["ship_id"],
        "date_facture": today.isoformat(),
        "date_echeance": (today + timedelta(days=30)).isoformat(),
        "taux_tva": "18",
        "lignes": [
            {
                "operation_id": references["operation_id"],
                "quantite": "2",
                "prix_unitaire_xof": "1000",
                "prix_unitaire_eur": "1.52",
            }
        ],
    }
    payload.update(overrides)
    return payload


def create_invoice(client, headers, references, **overrides):
    response = client.post(
        "/api/v1/invoices", json=invoice_payload(references, **overrides), headers=headers
    )
    assert response.status_code == 201
    return response.get_json()["invoice"]


class TestCreateInvoice:

    def test_operator_creates_draft_with_totals(self, client, operator, references):
        invoice = create_invoice(client, operator, references)

        assert invoice["numero"] == f"FAC-{date.today().year}-000001"
        assert invoice["statut"] == "BROUILLON"
        assert invoice["created_by"] == "operator"
        assert Decimal(invoice["montant_ht"]) == Decimal("2000")
        assert Decimal(invoice["tva"]) == Decimal("360")
        assert Decimal(invoice["montant_total"]) == Decimal("2360")
        assert len(invoice["lignes"]) == 1

    def test_numbers_follow_each_other(self, client, operator, references):
        create_invoice(client, operator, references)

        second = create_invoice(client, operator, references)

        assert second["numero"] == f"FAC-{date.today().year}-000002"

    def test_duplicate_number_is_409(self, client, operator, references):
        create_invoice(client, operator, references, numero="FAC-MANUAL-1")

        response = client.post(
            "/api/v1/invoices",
            json=invoice_payload(references, numero="FAC-MANUAL-1"),
            headers=operator,
        )

        assert response.status_code == 409

    def test_unknown_company_is_404(self, client, operator, references):
        response = client.post(
            "/api/v1/invoices",
            json=invoice_payload(
                references, company_id="00000000-0000-0000-0000-000000000000"
            ),
            headers=operator,
        )

        assert response.status_code == 404

    def test_empty_lines_rejected(self, client, operator, references):
        response = client.post(
            "/api/v1/invoices", json=invoice_payload(references, lignes=[]), headers=operator
        )

        assert response.status_code == 400
        assert "lignes" in response.get_json()["details"]

    def test_viewer_cannot_create(self, client, make_user, auth_headers, references):
        headers = auth_headers(make_user("viewer", roles=["VIEWER"]))

        response = client.post(
            "/api/v1/invoices", json=invoice_payload(references), headers=headers
        )

        assert response.status_code == 403

    def test_next_number_preview(self, client, operator, references):
        response = client.get("/api/v1/invoices/next-number", headers=operator)

        assert response.get_json() == {"numero": f"FAC-{date.today().year}-000001"}


class TestReadInvoices:

    def test_get_by_id_and_numero(self, client, operator, references):
        created = create_invoice(client, operator, references)

        by_id = client.get(f"/api/v1/invoices/{created['id']}", headers=operator)
        by_numero = client.get(
            f"/api/v1/invoices/numero/{created['numero']}", headers=operator
        )

        assert by_id.get_json()["invoice"]["numero"] == created["numero"]
        assert by_numero.get_json()["invoice"]["id"] == created["id"]

    def test_unknown_id_is_404(self, client, operator):
        response = client.get("/api/v1/invoices/not-a-uuid", headers=operator)

        assert response.status_code == 404
        assert response.get_json()["code"] == "RESOURCE_NOT_FOUND"

    def test_list_with_status_filter(self, client, operator, references):
        first = create_invoice(client, operator, references)
        create_invoice(client, operator, references)
        client.post(f"/api/v1/invoices/{first['id']}/emit", headers=operator)

        everything = client.get("/api/v1/invoices", headers=operator).get_json()
        emitted = client.get("/api/v1/invoices?statut=EMISE", headers=operator).get_json()

        assert everything["total"] == 2
        assert everything["limit"] == 20
        assert emitted["total"] == 1
        assert emitted["invoices"][0]["id"] == first["id"]

    def test_unknown_status_filter_is_400(self, client, operator):
        response = client.get("/api/v1/invoices?statut=PERDUE", headers=operator)

        assert response.status_code == 400

    def test_reading_requires_authentication(self, client):
        response = client.get("/api/v1/invoices")

        assert response.status_code == 401


class TestInvoiceStatus:

    def test_emit_then_pay(self, client, operator, references):
        invoice = create_invoice(client, operator, references)

        emitted = client.post(f"/api/v1/invoices/{invoice['id']}/emit", headers=operator)
        paid = client.post(
            f"/api/v1/invoices/{invoice['id']}/mark-paid",
            json={"commentaire": "Virement reçu"},
            headers=operator,
        )

        assert emitted.get_json()["invoice"]["statut"] == "EMISE"
        body = paid.get_json()["invoice"]
        assert body["statut"] == "PAYEE"
        assert "Payée: Virement reçu" in body["notes"]

    def test_patch_status(self, client, operator, references):
        invoice = create_invoice(client, operator, references)

        response = client.patch(
            f"/api/v1/invoices/{invoice['id']}/status",
            json={"statut": "EMISE"},
            headers=operator,
        )

        assert response.status_code == 200
        assert response.get_json()["invoice"]["statut"] == "EMISE"

    def test_cancel_without_comment_is_rejected(self, client, operator, references):
        invoice = create_invoice(client, operator, references)

        response = client.patch(
            f"/api/v1/invoices/{invoice['id']}/status",
            json={"statut": "ANNULEE"},
            headers=operator,
        )

        assert response.status_code == 400
        assert response.get_json()["code"] == "COMMENT_REQUIRED"

    def test_illegal_transition_is_rejected(self, client, operator, references):
        invoice = create_invoice(client, operator, references)

        response = client.patch(
            f"/api/v1/invoices/{invoice['id']}/status",
            json={"statut": "PAYEE"},
            headers=operator,
        )

        assert response.status_code == 400
        assert response.get_json()["code"] == "INVALID_STATUS_TRANSITION"

    def test_issued_invoice_is_not_editable(self, client, operator, references):
        invoice = create_invoice(client, operator, references)
        client.post(f"/api/v1/invoices/{invoice['id']}/emit", headers=operator)

        response = client.put(
            f"/api/v1/invoices/{invoice['id']}", json={"notes": "late"}, headers=operator
        )

        assert response.status_code == 400


class TestDeleteInvoices:

    def test_operator_cannot_delete(self, client, operator, references):
        invoice = create_invoice(client, operator, references)

        response = client.delete(f"/api/v1/invoices/{invoice['id']}", headers=operator)

        assert response.status_code == 403
        assert response.get_json()["code"] == "PERMISSION_DENIED"

    def test_manager_soft_deletes_draft(self, client, operator, manager, references):
        invoice = create_invoice(client, operator, references)

        response = client.delete(f"/api/v1/invoices/{invoice['id']}", headers=manager)

        assert response.status_code == 200
        assert client.get(
            f"/api/v1/invoices/{invoice['id']}", headers=manager
        ).status_code == 404

    def test_batch_delete_reports_each_invoice(self, client, operator, manager, references):
        draft = create_invoice(client, operator, references)
        issued = create_invoice(client, operator, references)
        client.post(f"/api/v1/invoices/{issued['id']}/emit", headers=operator)

        response = client.post(
            "/api/v1/invoices/batch/delete",
            json={"ids": [draft["id"], issued["id"]]},
            headers=manager,
        )

        result = response.get_json()
        assert result["succeeded"] == [draft["id"]]
        assert result["failed"][0]["id"] == issued["id"]
        assert result["failed"][0]["code"] == "INVOICE_NOT_DELETABLE"

    def test_batch_status(self, client, operator, references):
        first = create_invoice(client, operator, references)
        second = create_invoice(client, operator, references)

        response = client.post(
            "/api/v1/invoices/batch/status",
            json={"ids": [first["id"], second["id"]], "statut": "EMISE"},
            headers=operator,
        )

        assert sorted(response.get_json()["succeeded"]) == sorted([first["id"], second["id"]])


def dated(references, days_ago):
    invoice_date = date.today() - timedelta(days=days_ago)
    return {
        "date_facture": invoice_date.isoformat(),
        "date_echeance": (invoice_date + timedelta(days=30)).isoformat(),
    }


def line(references, quantite):
    return [{
        "operation_id": references["operation_id"],
        "quantite": quantite,
        "prix_unitaire_xof": "1000",
    }]


class TestListFilters:

    def test_invoice_date_range(self, client, operator, references):
        old = create_invoice(client, operator, references, **dated(references, 60))
        recent = create_invoice(client, operator, references, **dated(references, 10))
        cutoff = (date.today() - timedelta(days=30)).isoformat()

        since = client.get(f"/api/v1/invoices?date_debut={cutoff}", headers=operator)
        until = client.get(f"/api/v1/invoices?date_fin={cutoff}", headers=operator)

        assert [i["id"] for i in since.get_json()["invoices"]] == [recent["id"]]
        assert [i["id"] for i in until.get_json()["invoices"]] == [old["id"]]

    def test_range_bounds_are_inclusive(self, client, operator, references):
        invoice = create_invoice(client, operator, references, **dated(references, 5))
        day = invoice["date_facture"]

        response = client.get(
            f"/api/v1/invoices?date_debut={day}&date_fin={day}", headers=operator
        )

        assert response.get_json()["total"] == 1

    def test_month_and_year(self, client, operator, references):
        old = create_invoice(client, operator, references, **dated(references, 60))
        create_invoice(client, operator, references, **dated(references, 10))
        old_date = date.fromisoformat(old["date_facture"])

        response = client.get(
            f"/api/v1/invoices?mois={old_date.month}&annee={old_date.year}",
            headers=operator,
        )

        assert [i["id"] for i in response.get_json()["invoices"]] == [old["id"]]

    def test_amount_range_on_total(self, client, operator, references):
        small = create_invoice(client, operator, references, lignes=line(references, "2"))
        large = create_invoice(client, operator, references, lignes=line(references, "10"))

        above = client.get("/api/v1/invoices?min_amount=5000", headers=operator)
        below = client.get("/api/v1/invoices?max_amount=5000", headers=operator)
        exact = client.get(
            "/api/v1/invoices?min_amount=2360&max_amount=2360", headers=operator
        )

        assert Decimal(large["montant_total"]) == Decimal("11800")
        assert [i["id"] for i in above.get_json()["invoices"]] == [large["id"]]
        assert [i["id"] for i in below.get_json()["invoices"]] == [small["id"]]
        assert exact.get_json()["total"] == 1

    @pytest.mark.parametrize(
        "query",
        [
            "date_debut=2026-03-01&date_fin=2026-02-01",
            "min_amount=500&max_amount=100",
            "mois=13",
            "min_amount=-1",
        ],
    )
    def test_invalid_ranges_are_400(self, client, operator, query):
        response = client.get(f"/api/v1/invoices?{query}", headers=operator)

        assert response.status_code == 400


class TestRecentInvoices:

    def test_latest_first_with_limit(self, client, operator, manager, references):
        create_invoice(client, operator, references)
        second = create_invoice(client, operator, references)
        third = create_invoice(client, operator, references)
        client.delete(f"/api/v1/invoices/{third['id']}", headers=manager)

        response = client.get("/api/v1/invoices/recent?limit=1", headers=operator)

        assert [i["id"] for i in response.get_json()["invoices"]] == [second["id"]]

    def test_limit_is_bounded(self, client, operator):
        response = client.get("/api/v1/invoices/recent?limit=0", headers=operator)

        assert response.status_code == 400


class TestToggleActive:

    def test_flip_deactivates_then_restores(self, client, operator, manager, references):
        invoice = create_invoice(client, operator, references)
        url = f"/api/v1/invoices/{invoice['id']}"

        off = client.patch(f"{url}/toggle-active", headers=manager)
        hidden = client.get(url, headers=manager)
        on = client.patch(f"{url}/toggle-active", headers=manager)

        assert off.get_json()["invoice"]["active"] is False
        assert hidden.status_code == 404
        assert on.get_json()["invoice"]["active"] is True
        assert client.get(url, headers=manager).status_code == 200

    def test_restores_soft_deleted_invoice(self, client, operator, manager, references):
        invoice = create_invoice(client, operator, references)
        url = f"/api/v1/invoices/{invoice['id']}"
        client.delete(url, headers=manager)

        response = client.patch(f"{url}/toggle-active?active=true", headers=manager)

        assert response.status_code == 200
        assert response.get_json()["invoice"]["updated_by"] == "manager"
        listed = client.get("/api/v1/invoices", headers=manager).get_json()
        assert [i["id"] for i in listed["invoices"]] == [invoice["id"]]

    def test_explicit_state_already_held_is_noop(self, client, operator, manager, references):
        invoice = create_invoice(client, operator, references)

        response = client.patch(
            f"/api/v1/invoices/{invoice['id']}/toggle-active?active=true", headers=manager
        )

        assert response.status_code == 200
        assert response.get_json()["invoice"]["active"] is True

    def test_issued_invoice_cannot_be_deactivated(self, client, operator, manager, references):
        invoice = create_invoice(client, operator, references)
        client.post(f"/api/v1/invoices/{invoice['id']}/emit", headers=operator)

        response = client.patch(
            f"/api/v1/invoices/{invoice['id']}/toggle-active", headers=manager
        )

        assert response.status_code == 400
        assert response.get_json()["code"] == "INVOICE_NOT_DELETABLE"

    def test_operator_is_forbidden(self, client, operator, references):
        invoice = create_invoice(client, operator, references)

        response = client.patch(
            f"/api/v1/invoices/{invoice['id']}/toggle-active", headers=operator
        )

        assert response.status_code == 403

    def test_unknown_invoice_is_404(self, client, manager):
        response = client.patch(
            "/api/v1/invoices/00000000-0000-0000-0000-000000000000/toggle-active",
            headers=manager,
        )

        assert response.status_code == 404
