from django.urls import path
from rest_framework import routers

from subdomains import views


router = routers.DefaultRouter(trailing_slash=False)
router.register('requests', views.SubdomainRequestViewset, 'request')

urlpatterns = router.urls + [
    path('check-subdomain', views.CheckSubdomain.as_view(), name='check-subdomain'),
    path('create-dns-record', views.CreateDnsRecord.as_view(), name='create-dns-record'),
    path('delete-dns-record', views.DeleteDnsRecord.as_view(), name='delete-dns-record'),
    path('plan', views.Plan.as_view(), name='plan'),
]
