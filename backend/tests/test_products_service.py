import pytest

from verger.models import Product, StockMovement
from verger.validation import ConflictError, NotFoundError, ValidationError


@pytest.mark.products
class TestProductCatalog:
    def test_initial_stock_is_booked_as_entry_movement(self, services, make_product):
        product = make_product("Williams pears", stock=80, threshold=15)

        movements = services.store.list_movements(product_id=product.id)
        assert len(movements) == 1
        assert movements[0].direction == "entry"
        assert movements[0].quantity == 80
        assert movements[0].source == "Initial stock"
        assert product.stock_level == 80
        assert product.alert_threshold == 15

    def test_zero_initial_stock_has_no_movement(self, services, make_product):
        product = make_product(stock=0)
        assert services.store.count(StockMovement, product_id=product.id) == 0

    def test_default_alert_threshold(self, services):
        product = services.products.register_product(
            patch={"name": "Tomatoes", "category": "vegetable", "unit": "kg"}
        )
        assert product.alert_threshold == 10
        assert product.stock_alert is True

    def test_stock_alert_flag(self, make_product):
        assert make_product(stock=5, threshold=10).stock_alert is True
        assert make_product(stock=10, threshold=10).stock_alert is False

    def test_duplicate_name_conflicts(self, services, make_product):
        make_product("Carrots", category="vegetable")
        with pytest.raises(ConflictError):
            make_product("Carrots", category="vegetable")
        assert services.store.count(Product) == 1

    @pytest.mark.parametrize("patch", [
        {"name": "X", "category": "meat", "unit": "kg"},
        {"name": "X", "category": "fruit", "unit": "litre"},
        {"name": "", "category": "fruit", "unit": "kg"},
        {"name": "X", "category": "fruit", "unit": "kg", "stock_level": -1},
    ])
    def test_invalid_registration(self, services, patch):
        with pytest.raises(ValidationError):
            services.products.register_product(patch=patch)

    def test_update_does_not_touch_stock(self, services, make_product):
        product = make_product("Lettuces", category="vegetable", unit="piece", stock=45)

        services.products.update_product(product.id, patch={"alert_threshold": 20, "name": "Batavia lettuces"})

        updated = services.products.get_product(product.id)
        assert updated.name == "Batavia lettuces"
        assert updated.alert_threshold == 20
        assert updated.stock_level == 45

    def test_update_rejects_stock_level(self, services, make_product):
        product = make_product(stock=1)
        with pytest.raises(ValidationError):
            services.products.update_product(product.id, patch={"stock_level": 100})

    def test_update_unknown(self, services):
        with pytest.raises(NotFoundError):
            services.products.update_product(555, patch={"alert_threshold": 1})

    def test_rename_onto_existing_name_conflicts(self, services, make_product):
        make_product("Gala apples")
        other = make_product("Golden apples")
        with pytest.raises(ConflictError):
            services.products.update_product(other.id, patch={"name": "Gala apples"})

    def test_delete_product_without_history(self, services, make_product):
        product = make_product(stock=0)
        services.products.delete_product(product.id)

        with pytest.raises(NotFoundError):
            services.products.get_product(product.id)

    def test_delete_product_with_movements_conflicts(self, services, make_product):
        product = make_product(stock=3)
        with pytest.raises(ConflictError):
            services.products.delete_product(product.id)
        assert services.products.get_product(product.id) is not None

    def test_delete_unknown(self, services):
        with pytest.raises(NotFoundError):
            services.products.delete_product(31337)

    def test_list_ordered_by_name(self, services, make_product):
        make_product("Tomatoes", category="vegetable")
        make_product("Apple juice", category="processed", unit="piece")
        make_product("Carrots", category="vegetable")

        names = [p.name for p in services.products.list_products()]
        assert names == ["Apple juice", "Carrots", "Tomatoes"]
