import uuid

from django.contrib.auth.hashers import check_password, make_password
from django.db import models


class Restaurant(models.Model):
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	admin_uid = models.CharField(max_length=64, unique=True)
	password = models.CharField(max_length=128)
	restaurant_name = models.CharField(max_length=200)
	address = models.TextField(blank=True, null=True)
	email = models.EmailField(unique=True)
	phone = models.CharField(max_length=32, blank=True, null=True)
	gst_number = models.CharField(max_length=32, blank=True, null=True)
	upi_id = models.CharField(max_length=100, blank=True, null=True)
	table_count = models.PositiveIntegerField(default=10)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['-created_at']

	# Lets DRF treat an authenticated restaurant as request.user
	is_authenticated = True

	def set_password(self, raw_password):
		self.password = make_password(raw_password)

	def check_password(self, raw_password):
		return check_password(raw_password, self.password)

	def __str__(self):
		return f"{self.restaurant_name} ({self.admin_uid})"

class SuperAdmin(models.Model):
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	super_admin_uid = models.CharField(max_length=64, unique=True)
	password = models.CharField(max_length=128)
	name = models.CharField(max_length=200)
	email = models.EmailField(blank=True, null=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	is_authenticated = True

	def set_password(self, raw_password):
		self.password = make_password(raw_password)

	def check_password(self, raw_password):
		return check_password(raw_password, self.password)

	def __str__(self):
		return self.super_admin_uid

class AuthToken(models.Model):
	"""
	Opaque bearer tokens with an expiry.

	Also serves as the revocation list for signed tokens: a revoked token is
	stored with admin_uid set to BLACKLIST_OWNER.
	"""
	BLACKLIST_OWNER = 'blacklisted'

	token = models.CharField(max_length=512, unique=True)
	admin_uid = models.CharField(max_length=64, db_index=True)
	expires_at = models.DateTimeField(db_index=True)
	created_at = models.DateTimeField(auto_now_add=True)

	def __str__(self):
		return f"Token for {self.admin_uid} (expires {self.expires_at:%Y-%m-%d %H:%M})"
