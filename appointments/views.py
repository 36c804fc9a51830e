from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.choices import CancelledBy
from core.permissions import IsAppointmentParty, IsShopOwnerOrAdmin, is_platform_admin
from .models import Appointment
from .serializers import (
    AppointmentCancelSerializer,
    AppointmentCreateSerializer,
    AppointmentFilterSerializer,
    AppointmentSerializer,
    AppointmentStatusSerializer,
    PaymentConfirmSerializer,
)


class AppointmentObjectMixin:
    def get_appointment(self, request, pk):
        appointment = get_object_or_404(Appointment.objects.select_related('shop', 'service', 'customer', 'barber'), pk=pk)
        self.check_object_permissions(request, appointment)
        return appointment


class AppointmentCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = AppointmentCreateSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class AppointmentStatusView(AppointmentObjectMixin, APIView):
    permission_classes = [permissions.IsAuthenticated, IsShopOwnerOrAdmin]

    def post(self, request, pk):
        appointment = self.get_appointment(request, pk)
        serializer = AppointmentStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        cancelled_by = CancelledBy.ADMIN if is_platform_admin(request.user) else CancelledBy.SHOP
        appointment.transition_to(serializer.validated_data['status'], cancelled_by=cancelled_by)
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_200_OK)


class PaymentConfirmView(AppointmentObjectMixin, APIView):
    permission_classes = [permissions.IsAuthenticated, IsAppointmentParty]

    def post(self, request, pk):
        appointment = self.get_appointment(request, pk)
        serializer = PaymentConfirmSerializer(
            data=request.data,
            context={'request': request, 'appointment': appointment}
        )
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        appointment.confirm_payment(serializer.validated_data['confirmed_by'])
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_200_OK)


class AppointmentCancelView(AppointmentObjectMixin, APIView):
    permission_classes = [permissions.IsAuthenticated, IsAppointmentParty]

    def post(self, request, pk):
        appointment = self.get_appointment(request, pk)
        serializer = AppointmentCancelSerializer(
            data=request.data,
            context={'request': request, 'appointment': appointment}
        )
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        appointment.cancel(
            reason=serializer.validated_data['reason'],
            cancelled_by=serializer.validated_data['cancelled_by'],
            allowed_from=serializer.validated_data['allowed_from'],
        )
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_200_OK)


class AppointmentsListView(generics.ListAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = AppointmentSerializer

    def get_queryset(self):
        user = self.request.user
        qs = Appointment.objects.select_related('shop', 'service', 'customer', 'barber')

        shop = getattr(user, 'shop', None)
        if shop is None:
            return qs.filter(customer=user).order_by('-appointment_date', '-start_time')

        qs = qs.filter(shop=shop)

        filters = AppointmentFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)

        if filters.validated_data.get('date'):
            qs = qs.filter(appointment_date=filters.validated_data['date'])
        if filters.validated_data.get('status'):
            qs = qs.filter(status=filters.validated_data['status'])

        return qs.order_by('-appointment_date', 'start_time')
