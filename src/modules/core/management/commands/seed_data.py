from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.categories.models import Category
from modules.orders.assembler import CartLine
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.orders.services import OrderService
from modules.products.models import Product


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument(
            "--orders",
            type=int,
            default=30,
            help="Number of orders to place when the database has none.",
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        shoppers, users_created = self._seed_users()
        categories = self._seed_categories()
        products = self._seed_products(categories)
        orders_created = self._seed_orders(shoppers, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"categories={len(categories)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> tuple[list, int]:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="manager").exists():
            User.objects.create_user("manager", password="manager123", is_staff=True)
            created += 1

        shoppers = []
        for username in ("alice", "bruno", "carla"):
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(username, password=f"{username}123")
                created += 1
            shoppers.append(user)
        return shoppers, created

    def _seed_categories(self) -> dict[str, Category]:
        self.stdout.write("Creating categories...")
        categories: dict[str, Category] = {}
        for name, description in [
            ("Electronics", "Monitors, keyboards and other peripherals."),
            ("Furniture", "Desks, chairs and storage."),
            ("Office", "Paper, pens and desk supplies."),
        ]:
            category, _ = Category.objects.get_or_create(
                name=name, defaults={"description": description}
            )
            categories[name] = category
        self.stdout.write(self.style.SUCCESS("Creating categories... Done!"))
        return categories

    def _seed_products(self, categories: dict[str, Category]) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        catalog = [
            ('Monitor 27"', "Electronics", Decimal("1299.90")),
            ("Mechanical Keyboard", "Electronics", Decimal("399.90")),
            ("Gaming Mouse", "Electronics", Decimal("249.90")),
            ('Notebook 14"', "Electronics", Decimal("3999.00")),
            ("Headset", "Electronics", Decimal("299.90")),
            ("Office Desk", "Furniture", Decimal("899.00")),
            ("Ergonomic Chair", "Furniture", Decimal("1499.00")),
            ("Bookshelf", "Furniture", Decimal("699.00")),
            ("A4 Paper", "Office", Decimal("29.90")),
            ("Blue Pen", "Office", Decimal("4.90")),
            ("Notebook", "Office", Decimal("19.90")),
            ("Stapler", "Office", Decimal("39.90")),
            ("Sticky Notes", "Office", Decimal("12.90")),
            ("Calculator", "Office", Decimal("89.90")),
        ]
        for name, category, price in catalog:
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={
                    "description": f"{category} item.",
                    "price": price,
                    "stock_quantity": random.randint(20, 200),
                    "category": categories[category],
                    "is_active": True,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, shoppers: list, products: list[Product], count: int) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0
        if not shoppers or not products:
            self.stdout.write(self.style.WARNING("Skipping orders (no users/products)."))
            return 0

        service = OrderService()
        statuses = [
            OrderStatus.PENDING,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        ]
        weights = [0.30, 0.20, 0.15, 0.20, 0.15]

        orders_created = 0
        for _ in range(count):
            user = random.choice(shoppers)
            picked = random.sample(products, k=random.randint(1, min(4, len(products))))
            lines = [CartLine(product.id, random.randint(1, 3)) for product in picked]
            order = service.create_order(user.pk, lines)
            orders_created += 1

            status = random.choices(statuses, weights=weights, k=1)[0]
            if status == OrderStatus.CANCELLED:
                service.cancel_order(user.pk, order.id)
            elif status != OrderStatus.PENDING:
                service.update_status(order.id, status)

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
