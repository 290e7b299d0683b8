from django.urls import path
from . import views

urlpatterns = [
    # Divisions
    path('Divisions/GetAll', views.division_list, name='division-list'),
    path('Divisions', views.division_create, name='division-create'),
    path('Divisions/<int:pk>', views.division_detail, name='division-detail'),

    # Activities
    path('Activities/GetAll', views.activity_list, name='activity-list'),
    path('Activities', views.activity_create, name='activity-create'),
    path('Activities/<int:pk>', views.activity_detail, name='activity-detail'),

    # Products
    path('Products/GetAll', views.product_list, name='product-list'),
    path('Products', views.product_create, name='product-create'),
    path('Products/<int:pk>', views.product_detail, name='product-detail'),

    # Resource roles and resources
    path('ResourceRoles/GetAll', views.resource_role_list, name='resource-role-list'),
    path('ResourceRoles', views.resource_role_create, name='resource-role-create'),
    path('ResourceRoles/<int:pk>', views.resource_role_detail, name='resource-role-detail'),
    path('Resources/GetAll', views.resource_list, name='resource-list'),
    path('Resources', views.resource_create, name='resource-create'),
    path('Resources/<int:pk>', views.resource_detail, name='resource-detail'),

    # Error categories
    path('ErrorCategories/GetAll', views.error_category_list, name='error-category-list'),
    path('ErrorCategories', views.error_category_create, name='error-category-create'),
    path('ErrorCategories/<int:pk>', views.error_category_detail, name='error-category-detail'),
    path('ErrorSubCategories/GetAll', views.error_sub_category_list, name='error-sub-category-list'),
    path('ErrorSubCategories', views.error_sub_category_create, name='error-sub-category-create'),
    path('ErrorSubCategories/<int:pk>', views.error_sub_category_detail, name='error-sub-category-detail'),

    # Drawing descriptions
    path('DrawingDescriptions/GetAll', views.drawing_description_list, name='drawing-description-list'),
    path('DrawingDescriptions', views.drawing_description_create, name='drawing-description-create'),
    path('DrawingDescriptions/<int:pk>', views.drawing_description_detail, name='drawing-description-detail'),
]
