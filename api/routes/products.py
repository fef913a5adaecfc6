"""
api/routes/products.py -- Product catalog CRUD.

Routes:
  POST   /product               -- create (createProduct schema)
  GET    /product               -- list
  GET    /product/{product_id}  -- detail
  PUT    /product/{product_id}  -- partial update (updateProduct schema)
  DELETE /product/{product_id}  -- delete

Plain pass-through persistence: no auth, no business rules beyond the
request schemas and the id shape check.
"""

from fastapi import APIRouter, Depends, Request

from api.models import ProductCreate, ProductMessageResponse, ProductResponse, ProductUpdate
from api.validation import Purpose, validated_body
from catalog.models import Product
from catalog.store import ProductStore
from core.errors import InvalidId, NotFound
from core.ids import is_valid_id

router = APIRouter()


def get_product_store(request: Request) -> ProductStore:
    return request.app.state.product_store


@router.post("/product", response_model=ProductResponse)
def create_product(
    body: ProductCreate = Depends(validated_body(Purpose.CREATE_PRODUCT)),
    store: ProductStore = Depends(get_product_store),
) -> ProductResponse:
    product_id = store.create_product(Product(title=body.title, price=body.price, description=body.description))
    return ProductResponse.from_product(store.get_product(product_id))


@router.get("/product", response_model=list[ProductResponse])
def list_products(store: ProductStore = Depends(get_product_store)) -> list[ProductResponse]:
    return [ProductResponse.from_product(p) for p in store.list_products()]


@router.get("/product/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, store: ProductStore = Depends(get_product_store)) -> ProductResponse:
    _check_id(product_id)
    product = store.get_product(product_id)
    if product is None:
        raise NotFound("Product does not exist")
    return ProductResponse.from_product(product)


@router.put("/product/{product_id}", response_model=ProductMessageResponse)
def update_product(
    product_id: str,
    body: ProductUpdate = Depends(validated_body(Purpose.UPDATE_PRODUCT)),
    store: ProductStore = Depends(get_product_store),
) -> ProductMessageResponse:
    """Apply the fields present in the body; absent fields keep their value."""
    _check_id(product_id)
    if not store.update_product(product_id, title=body.title, price=body.price, description=body.description):
        raise NotFound("Product does not exist")
    return ProductMessageResponse(message="Updated", product=ProductResponse.from_product(store.get_product(product_id)))


@router.delete("/product/{product_id}", response_model=ProductMessageResponse)
def delete_product(product_id: str, store: ProductStore = Depends(get_product_store)) -> ProductMessageResponse:
    _check_id(product_id)
    deleted = store.delete_product(product_id)
    if deleted is None:
        raise NotFound("Product was not found", status_code=400)
    return ProductMessageResponse(message="Deleted", product=ProductResponse.from_product(deleted))


def _check_id(product_id: str) -> None:
    if not is_valid_id(product_id):
        raise InvalidId()
