"""Product management — commands and handler for the admin product surface."""

import json

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.product.product import Product


@ordering.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=255)
    description = Text()
    images = Text()  # JSON: list of image URLs
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)


@ordering.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="Product")
class PutProductOnSale:
    product_id = Identifier(required=True)
    sale_price = Float(required=True, min_value=0.0)


@ordering.command(part_of="Product")
class EndProductSale:
    product_id = Identifier(required=True)


@ordering.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@ordering.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        images = json.loads(command.images) if isinstance(command.images, str) else command.images
        product = Product.create(
            name=command.name,
            price=command.price,
            stock=command.stock or 0,
            description=command.description,
            images=images,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(RestockProduct)
    def restock_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.restock(command.quantity)
        repo.add(product)

    @handle(PutProductOnSale)
    def put_product_on_sale(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.put_on_sale(command.sale_price)
        repo.add(product)

    @handle(EndProductSale)
    def end_product_sale(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.end_sale()
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)
