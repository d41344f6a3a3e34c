import pytest

from verger.models import Client, Sale
from verger.validation import ConflictError, NotFoundError, ValidationError


@pytest.mark.clients
class TestCreateClient:
    def test_create_with_consent(self, services):
        client = services.clients.create_client(
            name="  Jean Martin ", email="j@example.com", phone="+33 (0)6 12-34-56-78", consent=True
        )

        assert client.name == "Jean Martin"
        assert client.consent is True
        assert client.active is True

    @pytest.mark.parametrize("consent", [False, 0, None, "yes", "true", 2])
    def test_consent_must_be_explicitly_true(self, services, consent):
        with pytest.raises(ValidationError):
            services.clients.create_client(name="Jean Martin", email="j@example.com", consent=consent)

        assert services.store.count(Client) == 0

    def test_consent_as_one_is_accepted(self, services):
        client = services.clients.create_client(name="Sophie Bernard", consent=1)
        assert client.consent is True

    @pytest.mark.parametrize("name", ["", "   ", None, 42])
    def test_name_required(self, services, name):
        with pytest.raises(ValidationError):
            services.clients.create_client(name=name, consent=True)

    @pytest.mark.parametrize("email", ["not-an-email", "a@b", "a b@c.fr", "@example.com"])
    def test_invalid_email(self, services, email):
        with pytest.raises(ValidationError):
            services.clients.create_client(name="Pierre Durand", email=email, consent=True)

    @pytest.mark.parametrize("phone", ["06-12-AB", "0612345678#", "call me"])
    def test_invalid_phone(self, services, phone):
        with pytest.raises(ValidationError):
            services.clients.create_client(name="Pierre Durand", phone=phone, consent=True)

    def test_empty_optional_fields_stored_as_null(self, services):
        client = services.clients.create_client(name="Pierre Durand", email="", phone="", consent=True)

        assert client.email is None
        assert client.phone is None

    def test_duplicate_active_name_conflicts(self, services, make_client):
        make_client("Marie Dubois")

        with pytest.raises(ConflictError):
            services.clients.create_client(name="Marie Dubois ", consent=True)

    def test_name_reusable_after_deactivation(self, services, make_client):
        old = make_client("Marie Dubois")
        services.clients.deactivate_client(old.id)

        new = services.clients.create_client(name="Marie Dubois", consent=True)
        assert new.id != old.id


@pytest.mark.clients
class TestUpdateClient:
    def test_update_fields(self, services, make_client):
        client = make_client("Jean Martin", email="jean@example.com", phone="0600000000")

        services.clients.update_client(client.id, name=" Jean-Paul Martin ", phone="0611111111")

        updated = services.clients.get_client(client.id)
        assert updated.name == "Jean-Paul Martin"
        assert updated.phone == "0611111111"
        assert updated.email == "jean@example.com"

    def test_explicit_null_clears_email(self, services, make_client):
        client = make_client(email="jean@example.com")

        services.clients.update_client(client.id, email=None)

        assert services.clients.get_client(client.id).email is None

    def test_unknown_client(self, services):
        with pytest.raises(NotFoundError):
            services.clients.update_client(123, name="Nobody")

    def test_inactive_client_cannot_be_updated(self, services, make_client):
        client = make_client()
        services.clients.deactivate_client(client.id)

        with pytest.raises(NotFoundError):
            services.clients.update_client(client.id, name="Back again")

    @pytest.mark.parametrize("fields", [{"name": "  "}, {"email": "nope"}, {"phone": "abc"}])
    def test_validation(self, services, make_client, fields):
        client = make_client()
        with pytest.raises(ValidationError):
            services.clients.update_client(client.id, **fields)

    @pytest.mark.parametrize("field", ["consent", "active", "id"])
    def test_protected_fields_rejected(self, services, make_client, field):
        client = make_client()
        with pytest.raises(ValidationError):
            services.clients.update_client(client.id, **{field: False})

    def test_rename_onto_other_active_client_conflicts(self, services, make_client):
        make_client("Marie Dubois")
        other = make_client("Sophie Bernard")

        with pytest.raises(ConflictError):
            services.clients.update_client(other.id, name="Marie Dubois")


@pytest.mark.clients
class TestDeactivateClient:
    def test_deactivation_anonymizes_every_sale(self, services, make_product, make_client):
        product = make_product(stock=100)
        client = make_client("Jean Martin")
        bystander = make_client("Marie Dubois")
        for qty in (1, 2, 3):
            services.sales.record_sale(product_id=product.id, quantity=qty, channel="kiosk", client_id=client.id)
        services.sales.record_sale(product_id=product.id, quantity=4, channel="market", client_id=bystander.id)
        sales_before = services.store.count(Sale)

        result = services.clients.deactivate_client(client.id)

        assert result["anonymized_sales"] is True
        assert result["sales_anonymized_count"] == 3
        services.store.session.expire_all()
        assert services.store.get_client(client.id).active is False
        assert services.store.count(Sale) == sales_before
        assert services.store.count(Sale, client_id=client.id) == 0
        assert services.store.count(Sale, client_id=None) == 3
        assert services.store.count(Sale, client_id=bystander.id) == 1

    def test_redeactivation_is_idempotent(self, services, make_client):
        client = make_client()
        services.clients.deactivate_client(client.id)

        result = services.clients.deactivate_client(client.id)

        assert result["anonymized_sales"] is True
        assert result["sales_anonymized_count"] == 0
        assert services.clients.get_client(client.id).active is False

    def test_unknown_client(self, services):
        with pytest.raises(NotFoundError):
            services.clients.deactivate_client(999)

    def test_inactive_clients_hidden_from_listing(self, services, make_client):
        keep = make_client("Alice")
        gone = make_client("Bob")
        services.clients.deactivate_client(gone.id)

        names = [c.name for c in services.clients.list_active_clients()]
        assert names == [keep.name]


@pytest.mark.clients
def test_client_history(services, make_product, make_client):
    apples = make_product("Gala apples", stock=50)
    juice = make_product("Apple juice", category="processed", unit="piece", stock=20)
    client = make_client("Marie Dubois")
    services.sales.record_sale(product_id=apples.id, quantity=3, channel="market", client_id=client.id)
    services.sales.record_sale(product_id=juice.id, quantity=2, channel="kiosk", client_id=client.id)
    services.sales.record_sale(product_id=apples.id, quantity=1, channel="market", client_id=client.id)

    history = services.clients.client_history(client.id)

    assert history["client"]["name"] == "Marie Dubois"
    assert history["statistics"] == {
        "purchase_count": 3,
        "distinct_products": 2,
        "channels_used": ["kiosk", "market"],
    }
    assert [h["product_name"] for h in history["history"]][0] == "Gala apples"
    assert {h["category"] for h in history["history"]} == {"fruit", "processed"}
