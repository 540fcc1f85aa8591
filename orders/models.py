import uuid

from django.db import models

from restaurants.models import Restaurant


class Order(models.Model):
	STATUS_ACTIVE = 'active'
	STATUS_COMPLETED = 'completed'
	STATUS_CANCELLED = 'cancelled'
	STATUS_CHOICES = [
		(STATUS_ACTIVE, 'Active'),
		(STATUS_COMPLETED, 'Completed'),
		(STATUS_CANCELLED, 'Cancelled'),
	]

	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	restaurant = models.ForeignKey(Restaurant, to_field='admin_uid', db_column='admin_uid',
		on_delete=models.CASCADE, related_name='orders')
	session_id = models.CharField(max_length=64, db_index=True)
	table_number = models.PositiveIntegerField()
	order_status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['-created_at']
		indexes = [
			models.Index(fields=['restaurant', 'table_number', 'order_status'], name='order_table_status_idx'),
			models.Index(fields=['restaurant', 'order_status'], name='order_status_idx'),
		]

	def __str__(self):
		return f"Order {self.id} (Table {self.table_number})"

class OrderItem(models.Model):
	STATUS_PENDING = 'pending'
	STATUS_ACCEPTED = 'accepted'
	STATUS_PROCESSING = 'processing'
	STATUS_COMPLETED = 'completed'
	STATUS_REJECTED = 'rejected'
	STATUS_CHOICES = [
		(STATUS_PENDING, 'Pending'),
		(STATUS_ACCEPTED, 'Accepted'),
		(STATUS_PROCESSING, 'Processing'),
		(STATUS_COMPLETED, 'Completed'),
		(STATUS_REJECTED, 'Rejected'),
	]

	order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
	position = models.PositiveIntegerField()
	# Snapshot taken when the order is placed; the menu item may change or disappear later
	menu_item_id = models.UUIDField()
	name = models.CharField(max_length=200)
	price = models.DecimalField(max_digits=10, decimal_places=2)
	quantity = models.PositiveIntegerField()
	status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
	version = models.PositiveIntegerField(default=1)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['position']
		constraints = [
			models.UniqueConstraint(fields=['order', 'position'], name='uniq_order_item_position'),
		]

	def __str__(self):
		return f"{self.quantity} x {self.name} for Order {self.order_id}"
