import uuid

from django.db import models

from restaurants.models import Restaurant


class MenuItem(models.Model):
	CATEGORY_CHOICES = [
		('veg', 'Veg'),
		('nonveg', 'Non-Veg'),
		('cake', 'Cake'),
		('liquor', 'Liquor'),
		('drinks', 'Drinks'),
	]
	SUBCATEGORIES = {
		'veg': ['starters', 'main_course'],
		'nonveg': ['starters', 'main_course'],
		'cake': ['pastries', 'dessert_cakes', 'custom_cakes'],
		'liquor': ['whisky', 'rum', 'vodka', 'gin', 'beer', 'wine', 'imfl', 'country_liquor'],
		'drinks': ['soft_drinks', 'water', 'juices', 'mocktails', 'tea_coffee'],
	}

	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	restaurant = models.ForeignKey(Restaurant, to_field='admin_uid', db_column='admin_uid',
		on_delete=models.CASCADE, related_name='menu_items')
	name = models.CharField(max_length=200)
	price = models.DecimalField(max_digits=10, decimal_places=2)
	category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
	subcategory = models.CharField(max_length=40, blank=True, null=True)
	description = models.TextField(blank=True, null=True)
	image_url = models.URLField(max_length=500, blank=True, null=True)
	ingredients = models.JSONField(default=list, blank=True)
	calories = models.PositiveIntegerField(blank=True, null=True)
	is_available = models.BooleanField(default=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['category', 'name']

	def __str__(self):
		return self.name
