from django.db import models


class Division(models.Model):
    """Business divisions that own activities and projects"""
    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    is_live = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'divisions'
        ordering = ['name']


class Activity(models.Model):
    """Work activity of a division, e.g. Schematics or Layout"""
    name = models.CharField(max_length=200)
    division = models.ForeignKey(Division, on_delete=models.PROTECT, related_name='activities')
    order = models.PositiveIntegerField(default=0)
    is_live = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'activities'
        ordering = ['division_id', 'order', 'name']
        verbose_name_plural = 'activities'


class Product(models.Model):
    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    is_live = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'products'
        ordering = ['name']


class ResourceRole(models.Model):
    """Role of an external (customer side) resource"""
    name = models.CharField(max_length=200, unique=True)
    is_live = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'resource_roles'
        ordering = ['name']


class Resource(models.Model):
    """External resource, e.g. a Powell EDH manager or engineer"""
    name = models.CharField(max_length=200)
    role = models.ForeignKey(ResourceRole, on_delete=models.PROTECT, related_name='resources')
    is_live = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'resources'
        ordering = ['name']


class ErrorCategory(models.Model):
    name = models.CharField(max_length=200, unique=True)
    is_live = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'error_categories'
        ordering = ['name']
        verbose_name_plural = 'error categories'


class ErrorSubCategory(models.Model):
    name = models.CharField(max_length=200)
    category = models.ForeignKey(ErrorCategory, on_delete=models.PROTECT, related_name='sub_categories')
    is_live = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.category.name} / {self.name}"

    class Meta:
        db_table = 'error_sub_categories'
        ordering = ['category_id', 'name']
        verbose_name_plural = 'error sub categories'
        unique_together = [('category', 'name')]


class DrawingDescription(models.Model):
    description = models.CharField(max_length=500)
    is_live = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.description

    class Meta:
        db_table = 'drawing_descriptions'
        ordering = ['description']
