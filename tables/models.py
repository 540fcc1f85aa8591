import uuid

from django.db import models

from restaurants.models import Restaurant


class Table(models.Model):
	STATUS_VACANT = 'vacant'
	STATUS_ACTIVE = 'active'
	STATUS_BILLING = 'billing'
	STATUS_CHOICES = [
		(STATUS_VACANT, 'Vacant'),
		(STATUS_ACTIVE, 'Active'),
		(STATUS_BILLING, 'Billing'),
	]

	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	restaurant = models.ForeignKey(Restaurant, to_field='admin_uid', db_column='admin_uid',
		on_delete=models.CASCADE, related_name='tables')
	table_number = models.PositiveIntegerField()
	status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_VACANT)
	active_session_id = models.CharField(max_length=64, blank=True, null=True)
	otp = models.CharField(max_length=4)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['table_number']
		constraints = [
			models.UniqueConstraint(fields=['restaurant', 'table_number'], name='uniq_table_number_per_restaurant'),
			# vacant <=> no active session
			models.CheckConstraint(
				condition=(
					models.Q(status='vacant', active_session_id__isnull=True)
					| (~models.Q(status='vacant') & models.Q(active_session_id__isnull=False))
				),
				name='table_vacant_iff_no_session',
			),
		]

	@property
	def is_vacant(self):
		return self.status == self.STATUS_VACANT

	def __str__(self):
		return f"Table {self.table_number} ({self.restaurant_id})"
