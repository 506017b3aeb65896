# Overview: Pytest coverage for products, categories and tags.

"""
Catalog Service Tests

Covers slug derivation and per-seller uniqueness, the category forest
(same-seller parents, cycle rejection, reparenting on delete) and cleanup of
mapping rows when a product, category or tag is deleted.
"""

from decimal import Decimal

import pytest

from sellerdesk.models import Category, Product, ProductCategoryMapping, ProductTagMapping, Sale
from sellerdesk.services import catalog_service, sales_service
from sellerdesk.services.exceptions import UnauthorizedError
from sellerdesk.validation import ConflictError, ValidationError, slugify


class TestSlugify:
    def test_slugify(self):
        assert slugify("Ebooks & Guides") == "ebooks-guides"
        assert slugify("  Café Déjà Vu ") == "cafe-deja-vu"
        assert slugify("!!!") == ""


class TestCategories:
    """Category CRUD and forest rules."""

    def test_create_derives_slug(self, db_session, seller_a):
        category = catalog_service.create_category(seller_a.id, {"name": "Video Courses"})
        assert category.slug == "video-courses"
        assert category.parent_id is None

    def test_slug_unique_per_seller(self, db_session, seller_a, seller_b):
        catalog_service.create_category(seller_a.id, {"name": "Music"})

        with pytest.raises(ConflictError):
            catalog_service.create_category(seller_a.id, {"name": "music"})

        # Same slug under another seller is fine
        other = catalog_service.create_category(seller_b.id, {"name": "Music"})
        assert other.slug == "music"

    def test_name_without_slug_characters(self, db_session, seller_a):
        with pytest.raises(ValidationError):
            catalog_service.create_category(seller_a.id, {"name": "???"})

    def test_parent_must_belong_to_seller(self, db_session, seller_a, category_b):
        with pytest.raises(ValidationError):
            catalog_service.create_category(seller_a.id, {"name": "Child", "parent_id": category_b.id})

    def test_cycle_rejected(self, db_session, seller_a):
        root = catalog_service.create_category(seller_a.id, {"name": "Root"})
        child = catalog_service.create_category(seller_a.id, {"name": "Child", "parent_id": root.id})
        grandchild = catalog_service.create_category(seller_a.id, {"name": "Grandchild", "parent_id": child.id})

        with pytest.raises(ValidationError) as excinfo:
            catalog_service.update_category(seller_a.id, root.id, {"parent_id": grandchild.id})
        assert "own ancestor" in str(excinfo.value)

        with pytest.raises(ValidationError):
            catalog_service.update_category(seller_a.id, root.id, {"parent_id": root.id})

        assert db_session.get(Category, root.id).parent_id is None

    def test_tree(self, db_session, seller_a):
        root = catalog_service.create_category(seller_a.id, {"name": "Books"})
        catalog_service.create_category(seller_a.id, {"name": "Fiction", "parent_id": root.id})
        catalog_service.create_category(seller_a.id, {"name": "Audio"})

        tree = catalog_service.category_tree(seller_a.id)

        assert [node["name"] for node in tree] == ["Audio", "Books"]
        books = tree[1]
        assert [child["name"] for child in books["children"]] == ["Fiction"]

    def test_delete_reparents_children_and_clears_mappings(self, db_session, seller_a, product_a):
        root = catalog_service.create_category(seller_a.id, {"name": "Root"})
        child = catalog_service.create_category(seller_a.id, {"name": "Child", "parent_id": root.id})
        db_session.add(ProductCategoryMapping(product_id=product_a.id, category_id=root.id))
        db_session.commit()

        catalog_service.delete_category(seller_a.id, root.id)

        assert db_session.get(Category, root.id) is None
        assert db_session.get(Category, child.id).parent_id is None
        assert db_session.query(ProductCategoryMapping).count() == 0

    def test_foreign_category_update(self, db_session, seller_a, category_b):
        with pytest.raises(UnauthorizedError):
            catalog_service.update_category(seller_a.id, category_b.id, {"name": "Mine"})


class TestTags:
    def test_create_update_delete(self, db_session, seller_a, product_a):
        tag = catalog_service.create_tag(seller_a.id, {"name": "Best Seller"})
        assert tag.slug == "best-seller"

        tag = catalog_service.update_tag(seller_a.id, tag.id, {"slug": "Top Pick"})
        assert tag.slug == "top-pick"

        db_session.add(ProductTagMapping(product_id=product_a.id, tag_id=tag.id))
        db_session.commit()

        catalog_service.delete_tag(seller_a.id, tag.id)
        assert catalog_service.list_tags(seller_a.id) == []
        assert db_session.query(ProductTagMapping).count() == 0

    def test_duplicate_slug(self, db_session, seller_a, tags_a):
        with pytest.raises(ConflictError):
            catalog_service.create_tag(seller_a.id, {"name": "Python"})


class TestProducts:
    def test_list_scoped_and_filtered(self, db_session, seller_a, product_a, product_b):
        draft = catalog_service.create_product(seller_a.id, {"name": "Draft Course", "price": Decimal("9.99")})

        assert {p.id for p in catalog_service.list_products(seller_a.id)} == {product_a.id, draft.id}
        assert [p.id for p in catalog_service.list_products(seller_a.id, status="draft")] == [draft.id]

    def test_delete_clears_mappings(self, db_session, seller_a, categories_a, tags_a):
        product = catalog_service.create_product(seller_a.id, {"name": "Bundle"})
        db_session.add(ProductCategoryMapping(product_id=product.id, category_id=categories_a[0].id))
        db_session.add(ProductTagMapping(product_id=product.id, tag_id=tags_a[0].id))
        db_session.commit()

        catalog_service.delete_product(seller_a.id, product.id)

        assert db_session.get(Product, product.id) is None
        assert db_session.query(ProductCategoryMapping).count() == 0
        assert db_session.query(ProductTagMapping).count() == 0

    def test_delete_sold_product_conflicts(self, db_session, seller_a, product_a, sale_a):
        with pytest.raises(ConflictError):
            catalog_service.delete_product(seller_a.id, product_a.id)
        assert db_session.get(Product, product_a.id) is not None

    def test_assignments_view(self, db_session, seller_a, product_a, categories_a, tags_a):
        db_session.add(ProductCategoryMapping(product_id=product_a.id, category_id=categories_a[1].id))
        db_session.add(ProductTagMapping(product_id=product_a.id, tag_id=tags_a[0].id))
        db_session.commit()

        view = catalog_service.product_assignments(seller_a.id, product_a.id)

        assert [c["id"] for c in view["categories"]] == [categories_a[1].id]
        assert [t["id"] for t in view["tags"]] == [tags_a[0].id]


class TestSales:
    def test_create_sale_requires_product_or_membership(self, db_session, seller_a, customer_a):
        with pytest.raises(ValidationError):
            sales_service.create_sale(seller_a.id, customer_id=customer_a.id, amount="10.00")

    def test_create_sale_rejects_foreign_product(self, db_session, seller_a, customer_a, product_b):
        with pytest.raises(UnauthorizedError):
            sales_service.create_sale(
                seller_a.id, customer_id=customer_a.id, amount="10.00", product_id=product_b.id
            )

    @pytest.mark.parametrize("amount", ["0", "0.001", "12.345"])
    def test_create_sale_rejects_sub_cent_amount(self, db_session, seller_a, customer_a, product_a, amount):
        with pytest.raises(ValidationError):
            sales_service.create_sale(
                seller_a.id, customer_id=customer_a.id, amount=amount, product_id=product_a.id
            )
        assert db_session.query(Sale).count() == 0

    def test_create_membership_sale(self, db_session, seller_a, customer_a):
        sale = sales_service.create_sale(
            seller_a.id, customer_id=customer_a.id, amount="12.50", membership_id=3
        )
        assert db_session.get(Sale, sale.id).amount == Decimal("12.50")
        assert sale.status == "completed"

    def test_duplicate_seller_email(self, db_session, seller_a):
        with pytest.raises(ConflictError):
            sales_service.create_seller(name="Copy", email="ADA@example.com")
