"""
Lifecycle Microservice

Responsibilities:
- Quotes and order creation with invoices
- Payment confirmation and refunds
- Administrator approval, rejection and cancellation
- Shipment progress, assignment and incident reporting
- Unified order + shipment tracking timelines
"""

from fastapi import FastAPI, HTTPException, Depends, status, Query, Path, Body
import uvicorn
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from ...core.config import get_settings
from ...core.exceptions import (
    DuplicatePaymentError, InvalidTransitionError, LifecycleError,
    NotFoundError, PaymentDeclinedError, ValidationError,
)
from ...core.logger import setup_service_logger
from ..order_service.models import (
    Invoice, Order, OrderCancelRequest, OrderCreateRequest, OrderCreatedResponse,
    OrderDecisionRequest, OrderListResponse, OrderStatus,
)
from ..payment_service.models import Payment, PaymentConfirmRequest, PaymentListResponse, PaymentStatus
from ..pricing_service.models import QuoteRequest, QuoteResponse
from ..shipment_service.models import (
    DeliveryPersonAssignRequest, IncidentReportRequest, Shipment, ShipmentListResponse,
    ShipmentStatus, ShipmentStatusChangeRequest, VehicleAssignRequest,
)
from ..tracking_service.models import TimelineResponse
from .factory import create_lifecycle_service
from .lifecycle_service import LifecycleService

settings = get_settings()
config = settings.lifecycle

# Setup loggers (use actual service name)
logger = setup_service_logger(config.service_name, settings.logging)


class LifecycleMicroservice:
    """Lifecycle microservice core class"""

    def __init__(self):
        self.lifecycle_service: Optional[LifecycleService] = None

    async def initialize(self):
        """Initialize the microservice"""
        try:
            self.lifecycle_service = create_lifecycle_service(settings)
            await self.lifecycle_service.start()
            await self.lifecycle_service.recover()
            logger.info("Lifecycle microservice initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize lifecycle microservice: {e}")
            raise

    async def shutdown(self):
        """Shutdown the microservice"""
        try:
            if self.lifecycle_service and self.lifecycle_service.event_bus:
                await self.lifecycle_service.event_bus.close()
            logger.info("Lifecycle microservice shutdown completed")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")


# Global microservice instance
lifecycle_microservice = LifecycleMicroservice()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    await lifecycle_microservice.initialize()
    yield
    await lifecycle_microservice.shutdown()


# Create FastAPI application
app = FastAPI(
    title="Lifecycle Service",
    description="Order, payment and shipment lifecycle for parcel delivery",
    version="1.0.0",
    lifespan=lifespan
)


# Dependency injection
def get_lifecycle_service() -> LifecycleService:
    """Get lifecycle service instance"""
    if not lifecycle_microservice.lifecycle_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Lifecycle service not initialized"
        )
    return lifecycle_microservice.lifecycle_service


def to_http_error(e: LifecycleError) -> HTTPException:
    """Map lifecycle errors onto HTTP status codes"""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    if isinstance(e, (InvalidTransitionError, DuplicatePaymentError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, PaymentDeclinedError):
        detail = {"message": str(e)}
        if e.payment is not None:
            detail["payment_id"] = e.payment.payment_id
        return HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


# Health check endpoints
@app.get("/health")
async def health_check():
    """Service health check"""
    return {
        "status": "healthy",
        "service": config.service_name,
        "port": config.service_port,
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# Pricing endpoints

@app.post("/api/v1/quotes", response_model=QuoteResponse)
async def quote(
    request: QuoteRequest,
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Price a prospective order"""
    try:
        return await service.quote(request.origin, request.destination, request.package, request.distance_km)
    except LifecycleError as e:
        raise to_http_error(e)


# Order endpoints

@app.post("/api/v1/orders", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderCreateRequest,
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Create a new order awaiting payment"""
    try:
        return await service.create_order(
            request.user_id, request.origin, request.destination, request.package, request.distance_km
        )
    except LifecycleError as e:
        raise to_http_error(e)


@app.get("/api/v1/orders", response_model=OrderListResponse)
async def list_orders(
    order_status: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    user_id: Optional[str] = Query(None, description="Filter by user ID"),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """List orders"""
    orders = await service.list_orders(status=order_status, user_id=user_id)
    return OrderListResponse(orders=orders, count=len(orders))


@app.get("/api/v1/orders/{order_id}", response_model=Order)
async def get_order(
    order_id: str = Path(..., description="Order ID"),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Get order details"""
    try:
        return await service.get_order(order_id)
    except LifecycleError as e:
        raise to_http_error(e)


@app.post("/api/v1/orders/{order_id}/approve", response_model=Order)
async def approve_order(
    order_id: str = Path(..., description="Order ID"),
    request: OrderDecisionRequest = Body(...),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Approve a paid order"""
    try:
        return await service.approve_order(order_id, request.admin_id)
    except LifecycleError as e:
        raise to_http_error(e)


@app.post("/api/v1/orders/{order_id}/reject", response_model=Order)
async def reject_order(
    order_id: str = Path(..., description="Order ID"),
    request: OrderDecisionRequest = Body(...),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Reject a paid order"""
    try:
        return await service.reject_order(order_id, request.admin_id, request.reason or "")
    except LifecycleError as e:
        raise to_http_error(e)


@app.post("/api/v1/orders/{order_id}/cancel", response_model=Order)
async def cancel_order(
    order_id: str = Path(..., description="Order ID"),
    request: OrderCancelRequest = Body(...),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Cancel an order"""
    try:
        return await service.cancel_order(order_id, request.actor_id, request.reason)
    except LifecycleError as e:
        raise to_http_error(e)


@app.get("/api/v1/orders/{order_id}/timeline", response_model=TimelineResponse)
async def get_order_timeline(
    order_id: str = Path(..., description="Order ID"),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Unified order + shipment timeline"""
    try:
        return await service.get_unified_timeline(order_id=order_id)
    except LifecycleError as e:
        raise to_http_error(e)


@app.get("/api/v1/invoices/{invoice_id}", response_model=Invoice)
async def get_invoice(
    invoice_id: str = Path(..., description="Invoice ID"),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Get invoice"""
    try:
        return await service.get_invoice(invoice_id)
    except LifecycleError as e:
        raise to_http_error(e)


# Payment endpoints

@app.post("/api/v1/payments", response_model=Payment, status_code=status.HTTP_201_CREATED)
async def confirm_payment(
    request: PaymentConfirmRequest,
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Pay an invoice"""
    try:
        return await service.confirm_payment(request.invoice_id, request.payment_method)
    except LifecycleError as e:
        raise to_http_error(e)


@app.get("/api/v1/payments", response_model=PaymentListResponse)
async def list_payments(
    user_id: str = Query(..., description="User whose payments to list"),
    payment_status: Optional[PaymentStatus] = Query(None, alias="status", description="Filter by status"),
    receipts_only: bool = Query(False, description="Only payments that produced a receipt"),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """List a user's payments"""
    try:
        payments = await service.list_user_payments(user_id, status=payment_status, receipts_only=receipts_only)
    except LifecycleError as e:
        raise to_http_error(e)
    return PaymentListResponse(payments=payments, count=len(payments))


@app.get("/api/v1/payments/{payment_id}", response_model=Payment)
async def get_payment(
    payment_id: str = Path(..., description="Payment ID"),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Get payment"""
    try:
        return await service.get_payment(payment_id)
    except LifecycleError as e:
        raise to_http_error(e)


@app.post("/api/v1/payments/{payment_id}/refund", response_model=Payment)
async def refund_payment(
    payment_id: str = Path(..., description="Payment ID"),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Refund an approved payment"""
    try:
        return await service.refund_payment(payment_id)
    except LifecycleError as e:
        raise to_http_error(e)


# Shipment endpoints

@app.get("/api/v1/shipments", response_model=ShipmentListResponse)
async def list_shipments(
    shipment_status: Optional[ShipmentStatus] = Query(None, alias="status", description="Filter by status"),
    user_id: Optional[str] = Query(None, description="Filter by user ID"),
    delivery_person_id: Optional[str] = Query(None, description="Filter by delivery person"),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """List shipments"""
    shipments = await service.list_shipments(
        status=shipment_status, user_id=user_id, delivery_person_id=delivery_person_id
    )
    return ShipmentListResponse(shipments=shipments, count=len(shipments))


@app.get("/api/v1/shipments/delayed", response_model=ShipmentListResponse)
async def list_delayed_shipments(
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Active shipments past their estimated delivery time"""
    shipments = await service.list_delayed_shipments()
    return ShipmentListResponse(shipments=shipments, count=len(shipments))


@app.get("/api/v1/shipments/{shipment_id}", response_model=Shipment)
async def get_shipment(
    shipment_id: str = Path(..., description="Shipment ID"),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Get shipment"""
    try:
        return await service.get_shipment(shipment_id)
    except LifecycleError as e:
        raise to_http_error(e)


@app.post("/api/v1/shipments/{shipment_id}/status", response_model=Shipment)
async def change_shipment_status(
    shipment_id: str = Path(..., description="Shipment ID"),
    request: ShipmentStatusChangeRequest = Body(...),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Advance a shipment one step"""
    try:
        return await service.change_shipment_status(shipment_id, request.status, request.reason, request.actor_id)
    except LifecycleError as e:
        raise to_http_error(e)


@app.post("/api/v1/shipments/{shipment_id}/delivery-person", response_model=Shipment)
async def assign_delivery_person(
    shipment_id: str = Path(..., description="Shipment ID"),
    request: DeliveryPersonAssignRequest = Body(...),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Assign a delivery person"""
    try:
        return await service.assign_delivery_person(shipment_id, request.delivery_person_id, request.actor_id)
    except LifecycleError as e:
        raise to_http_error(e)


@app.post("/api/v1/shipments/{shipment_id}/vehicle", response_model=Shipment)
async def assign_vehicle(
    shipment_id: str = Path(..., description="Shipment ID"),
    request: VehicleAssignRequest = Body(...),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Assign a vehicle"""
    try:
        return await service.assign_vehicle(shipment_id, request.vehicle_id, request.actor_id)
    except LifecycleError as e:
        raise to_http_error(e)


@app.post("/api/v1/shipments/{shipment_id}/incidents", response_model=Shipment)
async def report_incident(
    shipment_id: str = Path(..., description="Shipment ID"),
    request: IncidentReportRequest = Body(...),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Report an incident; the shipment is returned"""
    try:
        return await service.report_incident(
            shipment_id, request.incident_type, request.description, request.reported_by
        )
    except LifecycleError as e:
        raise to_http_error(e)


@app.get("/api/v1/shipments/{shipment_id}/timeline", response_model=TimelineResponse)
async def get_shipment_timeline(
    shipment_id: str = Path(..., description="Shipment ID"),
    service: LifecycleService = Depends(get_lifecycle_service)
):
    """Unified order + shipment timeline, looked up by shipment"""
    try:
        return await service.get_unified_timeline(shipment_id=shipment_id)
    except LifecycleError as e:
        raise to_http_error(e)


# Admin endpoints

@app.post("/api/v1/admin/recover")
async def recover(service: LifecycleService = Depends(get_lifecycle_service)):
    """Re-apply interrupted lifecycle steps"""
    return await service.recover()


if __name__ == "__main__":
    uvicorn.run(
        "parcelflow.services.lifecycle_service.main:app",
        host=config.service_host,
        port=config.service_port,
        reload=False,
        log_level=settings.logging.log_level.lower()
    )
