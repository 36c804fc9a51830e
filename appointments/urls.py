from django.urls import path
from .views import (
    AppointmentCancelView,
    AppointmentCreateView,
    AppointmentStatusView,
    AppointmentsListView,
    PaymentConfirmView,
)

urlpatterns = [
    path("appointments/", AppointmentCreateView.as_view(), name="appointment-create"),
    path("appointments/me/", AppointmentsListView.as_view(), name="my-appointments"),
    path("appointments/<int:pk>/status/", AppointmentStatusView.as_view(), name="appointment-status"),
    path("appointments/<int:pk>/confirm-payment/", PaymentConfirmView.as_view(), name="appointment-confirm-payment"),
    path("appointments/<int:pk>/cancel/", AppointmentCancelView.as_view(), name="appointment-cancel"),
]
