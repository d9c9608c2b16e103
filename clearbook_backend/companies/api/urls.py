# companies/api/urls.py

from django.urls import path

from companies.api.views import CompanyDetailView, PaymentFormLockView

app_name = "companies"

urlpatterns = [
    path("", CompanyDetailView.as_view(), name="detail"),
    path("payment-form-lock/", PaymentFormLockView.as_view(), name="payment-form-lock"),
]
