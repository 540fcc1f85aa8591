import uuid

from django.db import models

from restaurants.models import Restaurant


class BillSequence(models.Model):
	"""Per-restaurant bill counter, incremented under a row lock"""
	restaurant = models.OneToOneField(Restaurant, to_field='admin_uid', db_column='admin_uid',
		on_delete=models.CASCADE, related_name='bill_sequence')
	last = models.PositiveIntegerField(default=0)

	def __str__(self):
		return f"{self.restaurant_id}: {self.last}"

class Bill(models.Model):
	PAYMENT_CASH = 'cash'
	PAYMENT_UPI = 'upi'
	PAYMENT_CARD = 'card'
	PAYMENT_WALLET = 'wallet'
	PAYMENT_MODE_CHOICES = [
		(PAYMENT_CASH, 'Cash'),
		(PAYMENT_UPI, 'UPI'),
		(PAYMENT_CARD, 'Card'),
		(PAYMENT_WALLET, 'Wallet'),
	]

	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	bill_number = models.CharField(max_length=32)
	restaurant = models.ForeignKey(Restaurant, to_field='admin_uid', db_column='admin_uid',
		on_delete=models.CASCADE, related_name='bills')
	session_id = models.CharField(max_length=64, db_index=True)
	table_number = models.PositiveIntegerField()
	# [{"menu_item_id", "name", "price", "quantity"}], prices as strings
	items = models.JSONField(default=list)
	subtotal = models.DecimalField(max_digits=12, decimal_places=2)
	discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
	discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
	service_charge_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
	service_charge_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
	total_amount = models.DecimalField(max_digits=12, decimal_places=2)
	payment_mode = models.CharField(max_length=10, choices=PAYMENT_MODE_CHOICES, default=PAYMENT_CASH)
	is_final = models.BooleanField(default=False)
	generated_at = models.DateTimeField(auto_now_add=True)
	finalized_at = models.DateTimeField(null=True, blank=True)

	class Meta:
		ordering = ['-generated_at']
		indexes = [
			models.Index(fields=['restaurant', 'is_final'], name='bill_final_idx'),
		]
		constraints = [
			models.UniqueConstraint(fields=['restaurant', 'bill_number'], name='uniq_bill_number_per_restaurant'),
		]

	def __str__(self):
		return f"{self.bill_number} (Table {self.table_number})"

class SalesHistory(models.Model):
	"""Written once when a bill is finalized, read only by reports"""
	restaurant = models.ForeignKey(Restaurant, to_field='admin_uid', db_column='admin_uid',
		on_delete=models.CASCADE, related_name='sales')
	bill = models.OneToOneField(Bill, on_delete=models.CASCADE, related_name='sale')
	table_number = models.PositiveIntegerField()
	total_amount = models.DecimalField(max_digits=12, decimal_places=2)
	items_sold = models.JSONField(default=list)
	payment_mode = models.CharField(max_length=10, choices=Bill.PAYMENT_MODE_CHOICES)
	created_at = models.DateTimeField(auto_now_add=True, db_index=True)

	class Meta:
		ordering = ['-created_at']
		verbose_name_plural = 'sales history'

	def __str__(self):
		return f"Sale {self.bill_id} - {self.total_amount}"
