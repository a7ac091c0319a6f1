from decimal import Decimal

from decouple import config
from django.core.management.base import BaseCommand

from gadgetstore.infrastructure.models import Account
from gadgetstore.catalog.models import Product


PRODUCTS = [
    # name, category, brand, price, original price, quantity, featured, specs
    ('Galaxy S24', 'smartphones', 'Samsung', Decimal('799.00'), Decimal('899.00'), 12, True,
     {'Display': '6.2" AMOLED', 'Camera': '50 MP', 'Storage': '256 GB', 'Battery': '4000 mAh'}),
    ('iPhone 15', 'smartphones', 'Apple', Decimal('829.00'), None, 8, True,
     {'Display': '6.1" OLED', 'Camera': '48 MP', 'Storage': '128 GB', 'Battery': '3349 mAh'}),
    ('ZenBook 14', 'laptops', 'Asus', Decimal('1099.00'), Decimal('1199.00'), 4, False,
     {'Display': '14" OLED', 'Camera': '1080p', 'Storage': '1 TB SSD', 'Battery': '75 Wh'}),
    ('ThinkPad X1 Carbon', 'laptops', 'Lenovo', Decimal('1499.00'), None, 6, True,
     {'Display': '14" IPS', 'Camera': '1080p', 'Storage': '512 GB SSD', 'Battery': '57 Wh'}),
    ('iPad Air', 'tablets', 'Apple', Decimal('599.00'), None, 3, False,
     {'Display': '10.9" Liquid Retina', 'Camera': '12 MP', 'Storage': '64 GB', 'Battery': '28.6 Wh'}),
    ('USB-C Charger 65W', 'accessories', 'Anker', Decimal('39.99'), Decimal('49.99'), 40, False,
     {'Display': '', 'Camera': '', 'Storage': '', 'Battery': ''}),
    ('Wireless Earbuds', 'accessories', 'Sony', Decimal('129.00'), None, 0, False,
     {'Display': '', 'Camera': '', 'Storage': '', 'Battery': '8 h'}),
]


class Command(BaseCommand):
    help = 'Loads demo products and an administrator account'

    def add_arguments(self, parser):
        parser.add_argument('--admin-email', default=config('SEED_ADMIN_EMAIL', default='admin@gadgetstore.local'))
        parser.add_argument('--admin-password', default=config('SEED_ADMIN_PASSWORD', default='admin12345'))

    def handle(self, *args, **options):
        self.stdout.write('Loading initial data...')

        email = options['admin_email'].lower()
        if not Account.objects.filter(email=email).exists():
            Account.objects.create_superuser(email=email, password=options['admin_password'], username='admin')
            self.stdout.write(self.style.SUCCESS(f'Created administrator "{email}"'))

        for name, category, brand, price, original_price, quantity, featured, specs in PRODUCTS:
            product, created = Product.objects.get_or_create(
                name=name,
                defaults={
                    'description': f'{brand} {name}',
                    'category': category,
                    'brand': brand,
                    'price': price,
                    'original_price': original_price,
                    'quantity': quantity,
                    'featured': featured,
                    'specs': specs,
                }
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'Created product "{product.name}"'))

        self.stdout.write(self.style.SUCCESS('Initial data loaded.'))
